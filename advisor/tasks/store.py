"""TaskStore — libsql CRUD for advisor tasks."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from advisor.db import TableStore
from advisor.errors import PersistenceError
from advisor.tasks.models import PRIORITIES, STATUSES, Task

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS tasks (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id     TEXT NOT NULL,
    title       TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    due_date    TEXT,
    priority    TEXT NOT NULL DEFAULT 'medium',
    status      TEXT NOT NULL DEFAULT 'pending',
    context     TEXT NOT NULL DEFAULT '{}',
    result      TEXT,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
)
"""

_COLUMNS = (
    "id, user_id, title, description, due_date, priority, status, "
    "context, result, created_at, updated_at"
)
_INSERT_COLUMNS = _COLUMNS.removeprefix("id, ")

# Columns an update may touch, keyed by the field names callers use.
_UPDATABLE = {
    "title": "title",
    "description": "description",
    "due_date": "due_date",
    "dueDate": "due_date",
    "priority": "priority",
    "status": "status",
    "context": "context",
    "result": "result",
}


class TaskStore(TableStore):
    """Persists tasks. Pass an explicit *db_path* for test isolation."""

    _SCHEMA = (_CREATE_TABLE,)

    async def create(self, task: Task) -> Task:
        """Insert *task* and return it with its assigned id."""
        try:
            async with self._session() as db:
                cursor = await db.execute(
                    f"INSERT INTO tasks ({_INSERT_COLUMNS}) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    task.to_row(),
                )
                await db.commit()
        except Exception as exc:
            raise PersistenceError(f"Failed to create task: {exc}") from exc

        task.id = int(cursor.lastrowid)
        logger.info("Created task %d: %s", task.id, task.title)
        return task

    async def get(self, task_id: int) -> Task | None:
        async with self._session() as db:
            cursor = await db.execute(f"SELECT {_COLUMNS} FROM tasks WHERE id = ?", (task_id,))
            row = await cursor.fetchone()
        return Task.from_row(row) if row else None

    async def update(self, task_id: int, fields: dict[str, Any]) -> Task:
        """Apply *fields* to a task and return the updated task.

        Unknown field names are ignored. Raises ``ValueError`` for an invalid
        status or priority and ``PersistenceError`` if the task does not exist.
        """
        assignments: list[str] = []
        params: list[Any] = []
        for key, value in fields.items():
            column = _UPDATABLE.get(key)
            if column is None or value is None:
                continue
            if column == "status" and value not in STATUSES:
                raise ValueError(f"Invalid status {value!r}")
            if column == "priority" and value not in PRIORITIES:
                raise ValueError(f"Invalid priority {value!r}")
            if column in ("context", "result"):
                value = json.dumps(value, default=str)
            assignments.append(f"{column} = ?")
            params.append(value)

        assignments.append("updated_at = ?")
        params.append(datetime.now(UTC).isoformat())
        params.append(task_id)

        try:
            async with self._session() as db:
                cursor = await db.execute(
                    f"UPDATE tasks SET {', '.join(assignments)} WHERE id = ?",
                    tuple(params),
                )
                await db.commit()
                updated = cursor.rowcount
        except Exception as exc:
            raise PersistenceError(f"Failed to update task {task_id}: {exc}") from exc

        if not updated:
            raise PersistenceError(f"Task {task_id} not found")

        task = await self.get(task_id)
        if task is None:
            raise PersistenceError(f"Task {task_id} not found")
        logger.info("Updated task %d: %s", task_id, ", ".join(a.split(" ")[0] for a in assignments))
        return task

    async def list_tasks(self, user_id: str | None = None, status: str | None = None) -> list[Task]:
        """List tasks, newest first, optionally filtered by owner and status."""
        clauses: list[str] = []
        params: list[Any] = []
        if user_id:
            clauses.append("user_id = ?")
            params.append(user_id)
        if status:
            clauses.append("status = ?")
            params.append(status)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""

        async with self._session() as db:
            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM tasks{where} ORDER BY id DESC", tuple(params)
            )
            rows = await cursor.fetchall()
        return [Task.from_row(row) for row in rows]
