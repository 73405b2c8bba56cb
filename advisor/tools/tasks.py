"""Task tools — create and update follow-up tasks."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from pydantic import Field

from advisor.tasks.models import Task
from advisor.tools.base import ToolParams, ToolResult
from advisor.tools.registry import registry

if TYPE_CHECKING:
    from advisor.integrations.base import Providers

_CATEGORY = "tasks"

TITLE_LENGTH = 80


class CreateTaskParams(ToolParams):
    description: str = Field(min_length=1)
    context: dict[str, Any] | None = None


@registry.tool(name="create_task", category=_CATEGORY, params_model=CreateTaskParams)
async def create_task(
    description: str, context: dict[str, Any] | None, providers: Providers
) -> ToolResult:
    task = Task(
        title=description[:TITLE_LENGTH],
        description=description,
        context=context or {},
    )
    task = await providers.require_tasks().create(task)
    return ToolResult(data={"task": task.to_dict()})


class UpdateTaskParams(ToolParams):
    task_id: int = Field(alias="taskId")
    status: Literal["pending", "in_progress", "completed", "failed"] | None = None
    result: dict[str, Any] | None = None


@registry.tool(name="update_task", category=_CATEGORY, params_model=UpdateTaskParams)
async def update_task(
    task_id: int,
    status: str | None,
    result: dict[str, Any] | None,
    providers: Providers,
) -> ToolResult:
    task = await providers.require_tasks().update(task_id, {"status": status, "result": result})
    return ToolResult(data={"task": task.to_dict()})
