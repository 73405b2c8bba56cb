"""InstructionStore — persisted standing instructions.

Instructions are never deleted; retiring one sets ``active`` to false.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from advisor.db import TableStore
from advisor.errors import PersistenceError

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS agent_memory (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id     TEXT,
    instruction TEXT NOT NULL,
    active      INTEGER NOT NULL DEFAULT 1,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
)
"""

_COLUMNS = "id, user_id, instruction, active, created_at, updated_at"


@dataclass
class Instruction:
    id: int
    instruction: str
    active: bool = True
    user_id: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_row(cls, row: tuple) -> Instruction:
        return cls(
            id=row[0],
            user_id=row[1],
            instruction=row[2],
            active=bool(row[3]),
            created_at=row[4],
            updated_at=row[5],
        )


class InstructionStore(TableStore):
    """Persists standing instructions in the ``agent_memory`` table."""

    _SCHEMA = (_CREATE_TABLE,)

    async def add(self, text: str, user_id: str | None = None) -> Instruction:
        """Store a new active instruction. Raises ``PersistenceError`` on failure."""
        text = text.strip()
        if not text:
            raise ValueError("Instruction text must not be empty")

        now = datetime.now(UTC).isoformat()
        try:
            async with self._session() as db:
                cursor = await db.execute(
                    "INSERT INTO agent_memory (user_id, instruction, active, created_at, updated_at) "
                    "VALUES (?, ?, 1, ?, ?)",
                    (user_id, text, now, now),
                )
                await db.commit()
        except Exception as exc:
            raise PersistenceError(f"Failed to store instruction: {exc}") from exc

        instruction_id = int(cursor.lastrowid)
        logger.info("Added standing instruction %d", instruction_id)
        return Instruction(
            id=instruction_id,
            instruction=text,
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )

    async def get_active(self) -> list[Instruction]:
        """Active instructions, newest first. Raises ``PersistenceError`` on failure."""
        try:
            async with self._session() as db:
                cursor = await db.execute(
                    f"SELECT {_COLUMNS} FROM agent_memory WHERE active = 1 "
                    "ORDER BY created_at DESC, id DESC"
                )
                rows = await cursor.fetchall()
        except Exception as exc:
            raise PersistenceError(f"Failed to load instructions: {exc}") from exc
        return [Instruction.from_row(row) for row in rows]

    async def deactivate(self, instruction_id: int) -> bool:
        """Retire an instruction. Returns False if it does not exist."""
        async with self._session() as db:
            cursor = await db.execute(
                "UPDATE agent_memory SET active = 0, updated_at = ? WHERE id = ?",
                (datetime.now(UTC).isoformat(), instruction_id),
            )
            await db.commit()
            changed = cursor.rowcount
        return changed > 0
