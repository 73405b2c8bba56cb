"""Tests for the Task model and TaskStore."""

from pathlib import Path

import pytest

from advisor.errors import PersistenceError
from advisor.tasks.models import Task
from advisor.tasks.store import TaskStore

pytestmark = pytest.mark.usefixtures("_no_turso")


@pytest.fixture
def task_store(db_path: Path) -> TaskStore:
    return TaskStore(db_path=db_path)


# -- Model -------------------------------------------------------------------------


def test_task_defaults() -> None:
    task = Task(title="Call Sara")
    assert task.user_id == "system"
    assert task.priority == "medium"
    assert task.status == "pending"
    assert task.context == {}
    assert task.created_at
    assert task.updated_at == task.created_at


def test_task_rejects_invalid_priority() -> None:
    with pytest.raises(ValueError, match="priority"):
        Task(title="x", priority="urgent")


def test_task_rejects_invalid_status() -> None:
    with pytest.raises(ValueError, match="status"):
        Task(title="x", status="done")


def test_task_row_roundtrip() -> None:
    task = Task(title="x", context={"email": "m1"}, result={"ok": True})
    restored = Task.from_row((7, *task.to_row()))
    assert restored.id == 7
    assert restored.context == {"email": "m1"}
    assert restored.result == {"ok": True}


# -- Store -------------------------------------------------------------------------


async def test_create_assigns_increasing_ids(task_store: TaskStore) -> None:
    first = await task_store.create(Task(title="one"))
    second = await task_store.create(Task(title="two"))

    assert first.id is not None
    assert second.id > first.id


async def test_create_persists_row_under_assigned_id(
    task_store: TaskStore, db_path: Path
) -> None:
    created = await task_store.create(Task(title="Call Sara", context={"email": "m1"}))

    stored = await TaskStore(db_path=db_path).get(created.id)

    assert stored is not None
    assert stored.title == "Call Sara"
    assert stored.context == {"email": "m1"}


async def test_get_missing_returns_none(task_store: TaskStore) -> None:
    assert await task_store.get(42) is None


async def test_update_fields(task_store: TaskStore) -> None:
    task = await task_store.create(Task(title="Prepare review", priority="low"))

    updated = await task_store.update(
        task.id,
        {"status": "completed", "priority": "high", "dueDate": "2025-03-01T10:00:00Z"},
    )

    assert updated.status == "completed"
    assert updated.priority == "high"
    assert updated.due_date == "2025-03-01T10:00:00Z"
    assert updated.title == "Prepare review"
    assert updated.updated_at >= task.updated_at


async def test_update_ignores_none_and_unknown(task_store: TaskStore) -> None:
    task = await task_store.create(Task(title="x", description="keep me"))

    updated = await task_store.update(task.id, {"description": None, "bogus": 1})

    assert updated.description == "keep me"


async def test_update_rejects_invalid_status(task_store: TaskStore) -> None:
    task = await task_store.create(Task(title="x"))
    with pytest.raises(ValueError, match="status"):
        await task_store.update(task.id, {"status": "done"})


async def test_update_missing_task(task_store: TaskStore) -> None:
    with pytest.raises(PersistenceError, match="not found"):
        await task_store.update(999, {"status": "completed"})


async def test_list_tasks_filters(task_store: TaskStore) -> None:
    await task_store.create(Task(title="a", user_id="u1"))
    done = await task_store.create(Task(title="b", user_id="u1"))
    await task_store.create(Task(title="c", user_id="u2"))
    await task_store.update(done.id, {"status": "completed"})

    all_tasks = await task_store.list_tasks()
    assert [t.title for t in all_tasks] == ["c", "b", "a"]

    u1_pending = await task_store.list_tasks(user_id="u1", status="pending")
    assert [t.title for t in u1_pending] == ["a"]
