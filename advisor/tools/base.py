"""Base types for the tool-calling framework."""

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict


@dataclass
class ToolResult:
    """Result of a tool execution.

    Every tool returns one of these, including failed and unknown tools.
    """

    data: dict[str, Any] | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        """Flat ``{"success": ..., **payload}`` or ``{"success": False, "error": ...}``."""
        if self.error is not None:
            return {"success": False, "error": self.error}
        return {"success": True, **(self.data or {})}

    def to_content(self) -> str:
        """Serialize for a tool-role message."""
        return json.dumps(self.to_dict(), default=str)


class ToolParams(BaseModel):
    """Base class for tool parameter models.

    Field aliases carry the camelCase names used in the tool schemas
    (e.g. ``maxResults``); handlers receive the snake_case field names.
    """

    model_config = ConfigDict(populate_by_name=True)
