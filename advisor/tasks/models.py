"""Task data model."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any

PRIORITIES = ("low", "medium", "high")
STATUSES = ("pending", "in_progress", "completed", "failed")


@dataclass
class Task:
    """A unit of follow-up work for the advisor.

    Attributes:
        id: Database-assigned integer id (``None`` until stored).
        user_id: Owner, ``"system"`` for tasks created by the assistant.
        title: Short label.
        description: Full description of the work.
        due_date: ISO 8601 due timestamp, optional.
        priority: One of ``low``, ``medium``, ``high``.
        status: One of ``pending``, ``in_progress``, ``completed``, ``failed``.
        context: Free-form data the task was created from.
        result: Free-form data recorded when the task finishes.
    """

    title: str
    description: str = ""
    user_id: str = "system"
    due_date: str | None = None
    priority: str = "medium"
    status: str = "pending"
    context: dict[str, Any] = field(default_factory=dict)
    result: dict[str, Any] | None = None
    id: int | None = None
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        if self.priority not in PRIORITIES:
            msg = f"Invalid priority {self.priority!r}; expected one of {', '.join(PRIORITIES)}"
            raise ValueError(msg)
        if self.status not in STATUSES:
            msg = f"Invalid status {self.status!r}; expected one of {', '.join(STATUSES)}"
            raise ValueError(msg)
        if not self.created_at:
            self.created_at = datetime.now(UTC).isoformat()
        if not self.updated_at:
            self.updated_at = self.created_at

    # -- Serialization ---------------------------------------------------------

    def to_row(self) -> tuple:
        """Serialize to a tuple matching the insertable ``tasks`` columns."""
        return (
            self.user_id,
            self.title,
            self.description,
            self.due_date,
            self.priority,
            self.status,
            json.dumps(self.context, default=str),
            json.dumps(self.result, default=str) if self.result is not None else None,
            self.created_at,
            self.updated_at,
        )

    @classmethod
    def from_row(cls, row: tuple) -> Task:
        """Deserialize from a row whose first column is ``id``."""
        return cls(
            id=row[0],
            user_id=row[1],
            title=row[2],
            description=row[3] or "",
            due_date=row[4],
            priority=row[5],
            status=row[6],
            context=json.loads(row[7] or "{}"),
            result=json.loads(row[8]) if row[8] else None,
            created_at=row[9],
            updated_at=row[10],
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
