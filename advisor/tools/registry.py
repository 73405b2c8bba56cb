"""Tool registry — maps declared tool names to typed async handlers."""

from __future__ import annotations

import inspect
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from advisor.errors import ProviderCallError, ToolRegistryError, UnknownToolError
from advisor.integrations.base import Providers
from advisor.tools.base import ToolParams, ToolResult
from advisor.tools.definitions import TOOLS, schema_by_name

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass
class ToolDef:
    """Internal representation of a registered tool."""

    name: str
    category: str
    handler: Callable[..., Awaitable[ToolResult]]
    params_model: type[ToolParams] | None = None


def _required_aliases(model: type[ToolParams] | None) -> set[str]:
    if model is None:
        return set()
    return {
        field.alias or name
        for name, field in model.model_fields.items()
        if field.is_required()
    }


class ToolRegistry:
    """Central registry for all tools.

    Handlers register with the decorator::

        @registry.tool(name="search_emails", category="gmail", params_model=SearchEmailsParams)
        async def search_emails(query: str, max_results: int, providers: Providers) -> ToolResult:
            ...

    ``validate()`` checks the registered handlers against the declared
    schemas once at startup.
    """

    def __init__(self, schemas: list[dict[str, Any]] | None = None) -> None:
        self._tools: dict[str, ToolDef] = {}
        self._schemas = schema_by_name(schemas if schemas is not None else TOOLS)

    def tool(
        self,
        *,
        name: str,
        category: str,
        params_model: type[ToolParams] | None = None,
    ) -> Callable:
        """Decorator to register an async function as a tool."""

        def decorator(fn: Callable[..., Awaitable[ToolResult]]) -> Callable:
            if not inspect.iscoroutinefunction(fn):
                msg = f"Tool handler '{name}' must be an async function"
                raise TypeError(msg)
            if name in self._tools:
                msg = f"Tool '{name}' is already registered"
                raise ToolRegistryError(msg)

            self._tools[name] = ToolDef(
                name=name,
                category=category,
                handler=fn,
                params_model=params_model,
            )
            return fn

        return decorator

    @property
    def tool_names(self) -> list[str]:
        """All registered tool names."""
        return list(self._tools.keys())

    def get_schemas(self) -> list[dict[str, Any]]:
        """Declared schemas for every registered tool, in declaration order."""
        return [schema for name, schema in self._schemas.items() if name in self._tools]

    def validate(self) -> None:
        """Check handlers against the declared schemas.

        Raises ``ToolRegistryError`` if a declared tool has no handler, a
        handler has no declared schema, or required parameters disagree.
        """
        problems: list[str] = []
        missing = [n for n in self._schemas if n not in self._tools]
        if missing:
            problems.append(f"no handler for: {', '.join(missing)}")
        undeclared = [n for n in self._tools if n not in self._schemas]
        if undeclared:
            problems.append(f"no schema for: {', '.join(undeclared)}")

        for name, tool_def in self._tools.items():
            schema = self._schemas.get(name)
            if schema is None:
                continue
            declared = set(schema["function"]["parameters"].get("required", []))
            accepted = _required_aliases(tool_def.params_model)
            if declared != accepted:
                problems.append(
                    f"{name}: schema requires {sorted(declared)}, handler requires {sorted(accepted)}"
                )

        if problems:
            raise ToolRegistryError("Tool registry mismatch: " + "; ".join(problems))
        logger.info("Tool registry validated: %d tool(s)", len(self._tools))

    def _resolve(self, name: str) -> ToolDef:
        tool_def = self._tools.get(name)
        if tool_def is None:
            raise UnknownToolError(name)
        return tool_def

    async def execute(
        self,
        name: str,
        arguments: dict[str, Any],
        providers: Providers | None = None,
    ) -> ToolResult:
        """Execute a tool by name with the given arguments.

        Never raises: unknown tools, invalid arguments and handler failures
        all come back as a failed ``ToolResult``. If the handler accepts a
        ``providers`` parameter, it is injected.
        """
        try:
            tool_def = self._resolve(name)
        except UnknownToolError as exc:
            logger.warning("Model requested unknown tool '%s'", name)
            return ToolResult(error=str(exc))

        logger.info("Tool '%s' called with %s", name, arguments)
        t0 = time.monotonic()

        try:
            if tool_def.params_model is not None:
                params = tool_def.params_model(**arguments)
                kwargs = params.model_dump()
            else:
                kwargs = dict(arguments)

            if _accepts_param(tool_def.handler, "providers"):
                kwargs["providers"] = providers if providers is not None else Providers()

            result = await tool_def.handler(**kwargs)
        except ValidationError as exc:
            logger.warning("Tool '%s' rejected arguments: %s", name, exc)
            return ToolResult(error=f"Invalid arguments for {name}: {exc}")
        except ProviderCallError as exc:
            elapsed = time.monotonic() - t0
            logger.warning("Tool '%s' provider call failed in %.2fs: %s", name, elapsed, exc)
            return ToolResult(error=str(exc))
        except Exception as exc:
            elapsed = time.monotonic() - t0
            logger.exception("Tool '%s' failed in %.2fs", name, elapsed)
            return ToolResult(error=str(exc) or f"Tool '{name}' failed")

        elapsed = time.monotonic() - t0
        if result.success:
            logger.info("Tool '%s' succeeded in %.2fs", name, elapsed)
        else:
            logger.warning("Tool '%s' returned error in %.2fs: %s", name, elapsed, result.error)
        return result


def _accepts_param(fn: Callable[..., Any], param_name: str) -> bool:
    """Check whether a callable accepts a given parameter name."""
    return param_name in inspect.signature(fn).parameters


# Global registry. Tool modules register into it at import time.
registry = ToolRegistry()
