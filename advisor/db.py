"""libsql access shared by the advisor stores.

All stores live in one database: a local SQLite file by default, or a hosted
Turso database when ``TURSO_DATABASE_URL`` is set.  The libsql driver is
synchronous, so every call runs in a worker thread via ``asyncio.to_thread()``.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import libsql

from advisor.config import settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

_LOCAL_PRAGMAS = ("PRAGMA journal_mode=WAL", "PRAGMA busy_timeout=5000")


@dataclass(frozen=True)
class DatabaseTarget:
    """Where a connection goes: a local file, or a remote URL with its token."""

    path: Path | None = None
    url: str = ""
    auth_token: str = ""

    @classmethod
    def resolve(cls, override: Path | None = None) -> DatabaseTarget:
        """Pick the target from settings; an explicit *override* path wins."""
        if override is not None:
            return cls(path=override)
        if settings.turso_database_url:
            return cls(url=settings.turso_database_url, auth_token=settings.turso_auth_token)
        return cls(path=settings.database_path)

    @property
    def remote(self) -> bool:
        return bool(self.url)

    def open(self) -> Any:
        """Open a blocking libsql connection. Call from a worker thread."""
        if self.remote:
            return libsql.connect(database=self.url, auth_token=self.auth_token)

        if self.path is None:
            raise ValueError("DatabaseTarget needs a path or a url")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = libsql.connect(str(self.path))
        for pragma in _LOCAL_PRAGMAS:
            conn.execute(pragma)
        return conn


class Cursor:
    """Rows produced by ``Connection.execute``."""

    def __init__(self, raw: Any) -> None:
        self._raw = raw

    async def fetchone(self) -> tuple | None:
        return await asyncio.to_thread(self._raw.fetchone)

    async def fetchall(self) -> list[tuple]:
        return await asyncio.to_thread(self._raw.fetchall)

    @property
    def rowcount(self) -> int:
        return self._raw.rowcount

    @property
    def lastrowid(self) -> int | None:
        return self._raw.lastrowid


class Connection:
    """Async facade over one libsql connection."""

    def __init__(self, raw: Any) -> None:
        self._raw = raw

    async def execute(self, sql: str, params: tuple = ()) -> Cursor:
        return Cursor(await asyncio.to_thread(self._raw.execute, sql, params))

    async def commit(self) -> None:
        await asyncio.to_thread(self._raw.commit)

    async def close(self) -> None:
        await asyncio.to_thread(self._raw.close)


async def connect(target: DatabaseTarget) -> Connection:
    return Connection(await asyncio.to_thread(target.open))


class TableStore:
    """Base for stores that own one or more tables in the shared database.

    Subclasses set ``_SCHEMA`` to the ``CREATE TABLE IF NOT EXISTS`` statements
    they need; these run once per instance on first connect.  Pass an explicit
    *db_path* for test isolation (e.g. ``tmp_path / "test.db"``).
    """

    _SCHEMA: tuple[str, ...] = ()

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path
        self._initialised = False

    async def _connect(self) -> Connection:
        # Resolved per connection so settings changes take effect
        db = await connect(DatabaseTarget.resolve(self._db_path))
        if not self._initialised:
            for statement in self._SCHEMA:
                await db.execute(statement)
            await db.commit()
            self._initialised = True
        return db

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[Connection]:
        """Open a connection for the duration of a block, closing it afterwards."""
        db = await self._connect()
        try:
            yield db
        finally:
            await db.close()
