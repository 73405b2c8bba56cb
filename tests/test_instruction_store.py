"""Tests for InstructionStore."""

from pathlib import Path

import pytest

from advisor.errors import PersistenceError
from advisor.instructions.store import InstructionStore

pytestmark = pytest.mark.usefixtures("_no_turso")


@pytest.fixture
def instructions(db_path: Path) -> InstructionStore:
    return InstructionStore(db_path=db_path)


async def test_add_and_get_active(instructions: InstructionStore) -> None:
    first = await instructions.add("When a new contact is created, send a welcome email")
    second = await instructions.add("  Always cc my assistant  ")

    active = await instructions.get_active()

    assert [i.id for i in active] == [second.id, first.id]
    assert active[0].instruction == "Always cc my assistant"
    assert all(i.active for i in active)


async def test_add_rejects_empty(instructions: InstructionStore) -> None:
    with pytest.raises(ValueError):
        await instructions.add("   ")


async def test_deactivate(instructions: InstructionStore) -> None:
    kept = await instructions.add("keep")
    retired = await instructions.add("retire")

    assert await instructions.deactivate(retired.id) is True
    assert [i.id for i in await instructions.get_active()] == [kept.id]


async def test_deactivate_unknown(instructions: InstructionStore) -> None:
    assert await instructions.deactivate(123) is False


async def test_get_active_failure_raises_persistence_error(
    instructions: InstructionStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def _broken():
        raise RuntimeError("disk gone")

    monkeypatch.setattr(instructions, "_connect", _broken)

    with pytest.raises(PersistenceError, match="disk gone"):
        await instructions.get_active()


async def test_add_persists_under_assigned_id(
    instructions: InstructionStore, db_path: Path
) -> None:
    added = await instructions.add("when an urgent email arrives, notify me")

    active = await InstructionStore(db_path=db_path).get_active()

    assert [(i.id, i.instruction) for i in active] == [
        (added.id, "when an urgent email arrives, notify me")
    ]
