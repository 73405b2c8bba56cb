"""Explicit result type for calls across degradable boundaries.

Retrieval, embedding and completion calls report how they finished instead of
relying on the caller to intercept exceptions:

- ``success``: the call did what was asked.
- ``degraded``: a usable substitute was produced (e.g. a fallback vector).
- ``failed``: nothing usable was produced; ``error`` says why.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

T = TypeVar("T")

Status = Literal["success", "degraded", "failed"]


@dataclass
class Outcome(Generic[T]):
    status: Status
    value: T | None = None
    error: str | None = None
    exception: BaseException | None = None

    @classmethod
    def ok(cls, value: T) -> Outcome[T]:
        return cls(status="success", value=value)

    @classmethod
    def degraded(cls, value: T, error: str) -> Outcome[T]:
        return cls(status="degraded", value=value, error=error)

    @classmethod
    def failed(cls, exc: BaseException) -> Outcome[T]:
        return cls(status="failed", error=str(exc) or exc.__class__.__name__, exception=exc)

    def unwrap_or(self, default: T) -> T:
        """Return the value, or *default* when the call failed."""
        if self.status == "failed" or self.value is None:
            return default
        return self.value
