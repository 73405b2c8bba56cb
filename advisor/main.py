"""Advisor command-line entry point."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

from advisor.config import settings

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
)
logger = logging.getLogger(__name__)


def _print_result(result) -> None:  # noqa: ANN001
    print(result.response)
    for item in result.tool_results:
        status = "ok" if item.result.success else f"failed: {item.result.error}"
        print(f"  [tool] {item.tool_name} ({item.tool_call_id}): {status}")
    if result.status != "success":
        print(f"  [{result.status}] {result.error or ''}".rstrip())


async def _chat() -> None:
    from advisor.app import build_runtime

    runtime = build_runtime()
    agent = runtime.new_agent()
    mode = "online" if agent.online else "offline"
    print(f"Advisor chat ({mode}). Commands: /clear, /instruct <text>, /quit")

    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break
        line = line.strip()
        if not line:
            continue
        if line in ("/quit", "/exit"):
            break
        if line == "/clear":
            print(f"Cleared {agent.clear_history()} turn(s).")
            continue
        if line.startswith("/instruct "):
            instruction = await agent.add_instruction(line.removeprefix("/instruct "))
            print(f"Saved instruction {instruction.id}.")
            continue
        _print_result(await agent.process_message(line))


async def _ask(message: str) -> None:
    from advisor.app import build_runtime

    runtime = build_runtime()
    _print_result(await runtime.new_agent().process_message(message))


async def _instruct(text: str) -> None:
    from advisor.app import build_runtime

    runtime = build_runtime(use_configured_completion=False)
    instruction = await runtime.instructions.add(text)
    print(f"Saved instruction {instruction.id}: {instruction.instruction}")


async def _import_sample() -> None:
    from advisor.app import build_runtime
    from advisor.rag.sample_data import import_sample_data

    runtime = build_runtime(use_configured_completion=False)
    stored = await import_sample_data(runtime.processor)
    print(f"Imported {stored} chunk(s).")


async def _trigger(source: str, payload: str) -> None:
    from advisor.app import build_runtime

    runtime = build_runtime()
    await runtime.triggers.run(source, json.loads(payload), runtime)
    if runtime.proactive is not None:
        await runtime.proactive.drain()
    print(f"Handled {source} event.")


async def _status() -> None:
    from advisor.app import build_runtime

    runtime = build_runtime(use_configured_completion=False)
    providers = runtime.providers
    instructions = await runtime.instructions.get_active()
    pending = await runtime.tasks.list_tasks(status="pending")

    llm_state = "configured" if settings.llm_credential() else "offline"
    print(f"LLM provider:   {settings.llm_provider} ({llm_state})")
    print(f"Chunks stored:  {await runtime.store.count()}")
    print(f"Instructions:   {len(instructions)} active")
    print(f"Pending tasks:  {len(pending)}")
    print(f"Gmail:          {'enabled' if providers.email else 'disabled'}")
    print(f"Calendar:       {'enabled' if providers.calendar else 'disabled'}")
    print(f"HubSpot:        {'enabled' if providers.crm else 'disabled'}")
    print(f"Tools:          {', '.join(runtime.registry.tool_names)}")
    print(f"Trigger sources: {', '.join(runtime.triggers.sources)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="advisor", description="Advisor assistant")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("chat", help="Interactive conversation")

    ask = sub.add_parser("ask", help="Run a single turn and print the reply")
    ask.add_argument("message")

    instruct = sub.add_parser("instruct", help="Add a standing instruction")
    instruct.add_argument("text")

    sub.add_parser("import-sample", help="Load the sample emails, contacts, notes and events")

    trigger = sub.add_parser("trigger", help="Feed an external event to its trigger handler")
    trigger.add_argument("source", choices=["gmail", "calendar", "hubspot"])
    trigger.add_argument("payload", help="Event payload as a JSON object")

    sub.add_parser("status", help="Show configuration and store counts")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and run the selected command."""
    args = build_parser().parse_args(argv)

    if args.command == "chat":
        asyncio.run(_chat())
    elif args.command == "ask":
        asyncio.run(_ask(args.message))
    elif args.command == "instruct":
        asyncio.run(_instruct(args.text))
    elif args.command == "import-sample":
        asyncio.run(_import_sample())
    elif args.command == "trigger":
        asyncio.run(_trigger(args.source, args.payload))
    elif args.command == "status":
        asyncio.run(_status())


if __name__ == "__main__":
    main()
