"""TaskStore 单元测试

task_store fixture 对内存和 SQLite 两种后端各运行一遍；
SQLite 专属行为（事务回滚、驱动错误包装、WAL）单独测试。
"""

import asyncio
from datetime import date

import pytest
from taskpilot.core.exceptions import BackendError, TaskNotFoundError, TaskValidationError
from taskpilot.core.models import (
    SubtaskSpec,
    TaskCreate,
    TaskPriority,
    TaskStatus,
    TaskUpdate,
)
from taskpilot.core.store import (
    InMemoryTaskStore,
    create_store_group,
    seed_demo_tasks,
    verify_wal_mode,
)


class TestCreate:
    """创建任务"""

    async def test_create_assigns_id_and_defaults(self, task_store):
        task = await task_store.create_task(TaskCreate(title="Write tests"))
        assert task.id
        assert task.status == TaskStatus.TODO
        assert task.priority == TaskPriority.MEDIUM
        assert task.parent_id is None
        assert task.created_at == task.updated_at

        stored = await task_store.get_task(task.id)
        assert stored == task

    async def test_ids_are_unique(self, task_store):
        a = await task_store.create_task(TaskCreate(title="A"))
        b = await task_store.create_task(TaskCreate(title="A"))
        assert a.id != b.id

    async def test_empty_title_rejected(self, task_store):
        with pytest.raises(TaskValidationError):
            await task_store.create_task(TaskCreate(title=""))
        assert await task_store.list_tasks() == []

    async def test_absent_and_empty_description_are_distinct(self, task_store):
        absent = await task_store.create_task(TaskCreate(title="A"))
        empty = await task_store.create_task(TaskCreate(title="B", description=""))
        assert (await task_store.get_task(absent.id)).description is None
        assert (await task_store.get_task(empty.id)).description == ""

    async def test_list_newest_first(self, task_store):
        first = await task_store.create_task(TaskCreate(title="first"))
        await asyncio.sleep(0.001)
        second = await task_store.create_task(TaskCreate(title="second"))
        ids = [t.id for t in await task_store.list_tasks()]
        assert ids == [second.id, first.id]


class TestUpdate:
    """部分更新"""

    async def test_only_supplied_fields_change(self, task_store):
        task = await task_store.create_task(
            TaskCreate(title="Report", description="quarterly", due_date=date(2025, 1, 31))
        )
        updated = await task_store.update_task(task.id, TaskUpdate(priority=TaskPriority.HIGH))

        assert updated.priority == TaskPriority.HIGH
        assert updated.title == "Report"
        assert updated.description == "quarterly"
        assert updated.due_date == date(2025, 1, 31)
        assert updated.created_at == task.created_at
        assert updated.updated_at > task.updated_at
        assert await task_store.get_task(task.id) == updated

    async def test_explicit_none_clears(self, task_store):
        task = await task_store.create_task(
            TaskCreate(title="Report", description="quarterly", due_date=date(2025, 1, 31))
        )
        updated = await task_store.update_task(
            task.id, TaskUpdate(description=None, due_date=None)
        )
        assert updated.description is None
        assert updated.due_date is None
        assert (await task_store.get_task(task.id)).due_date is None

    async def test_missing_task(self, task_store):
        with pytest.raises(TaskNotFoundError):
            await task_store.update_task("nope", TaskUpdate(status=TaskStatus.DONE))


class TestDelete:
    """级联删除"""

    async def test_delete_parent_removes_direct_children_only(self, task_store):
        parent = await task_store.create_task(TaskCreate(title="Parent"))
        other = await task_store.create_task(TaskCreate(title="Other"))
        children = await task_store.create_subtasks(
            parent.id, [SubtaskSpec(title="c1"), SubtaskSpec(title="c2")]
        )

        removed = await task_store.delete_task(parent.id)

        assert removed[0] == parent.id
        assert set(removed) == {parent.id, *(c.id for c in children)}
        remaining = await task_store.list_tasks()
        assert [t.id for t in remaining] == [other.id]

    async def test_delete_child_keeps_parent(self, task_store):
        parent = await task_store.create_task(TaskCreate(title="Parent"))
        [child] = await task_store.create_subtasks(parent.id, [SubtaskSpec(title="c1")])
        assert await task_store.delete_task(child.id) == [child.id]
        assert await task_store.get_task(parent.id) is not None


class TestSubtasks:
    """批量创建子任务"""

    async def test_children_forced_to_todo_medium(self, task_store):
        parent = await task_store.create_task(
            TaskCreate(title="Launch", status=TaskStatus.IN_PROGRESS, priority=TaskPriority.URGENT)
        )
        children = await task_store.create_subtasks(
            parent.id,
            [SubtaskSpec(title="Write copy"), SubtaskSpec(title="Deploy", description="prod")],
        )
        assert len(children) == 2
        for child in children:
            assert child.parent_id == parent.id
            assert child.status == TaskStatus.TODO
            assert child.priority == TaskPriority.MEDIUM
        assert children[1].description == "prod"
        assert len(await task_store.list_tasks()) == 3

    async def test_empty_list_rejected(self, task_store):
        parent = await task_store.create_task(TaskCreate(title="Launch"))
        with pytest.raises(TaskValidationError):
            await task_store.create_subtasks(parent.id, [])

    async def test_unknown_parent(self, task_store):
        with pytest.raises(TaskNotFoundError):
            await task_store.create_subtasks("missing", [SubtaskSpec(title="x")])


class TestBackendDifferences:
    """后端差异"""

    async def test_memory_delete_unknown_is_silent(self, memory_store):
        assert await memory_store.delete_task("missing") == []

    async def test_sqlite_delete_unknown_raises(self, sqlite_store):
        with pytest.raises(TaskNotFoundError):
            await sqlite_store.delete_task("missing")

    async def test_memory_store_seeded_by_default(self):
        store = InMemoryTaskStore()
        tasks = await store.list_tasks()
        assert {t.id for t in tasks} == {"demo-1", "demo-2", "demo-3"}
        # demo-1 最早创建，排在最后
        assert tasks[-1].id == "demo-1"
        demo_2 = await store.get_task("demo-2")
        assert demo_2.priority == TaskPriority.URGENT
        assert demo_2.due_date is not None


class TestSqliteBackend:
    """SQLite 专属行为"""

    async def test_wal_mode(self, db_conn):
        assert await verify_wal_mode(db_conn)

    async def test_subtask_insert_rolls_back_on_failure(self, sqlite_store, monkeypatch):
        """任一子任务写入失败时整批回滚"""
        parent = await sqlite_store.create_task(TaskCreate(title="Parent"))
        monkeypatch.setattr(
            "taskpilot.core.store.task_store.new_task_id", lambda: "duplicate-id"
        )

        with pytest.raises(BackendError):
            await sqlite_store.create_subtasks(
                parent.id, [SubtaskSpec(title="a"), SubtaskSpec(title="b")]
            )

        tasks = await sqlite_store.list_tasks()
        assert [t.id for t in tasks] == [parent.id]

    async def test_driver_error_wrapped(self, sqlite_store):
        await sqlite_store._conn.execute("DROP TABLE tasks")
        with pytest.raises(BackendError) as exc_info:
            await sqlite_store.list_tasks()
        assert exc_info.value.recoverable is False
        assert exc_info.value.__cause__ is not None
        assert exc_info.value.operation == "load tasks"

    async def test_data_survives_reopen(self, tmp_path):
        db_path = str(tmp_path / "reopen.db")
        group = await create_store_group("sqlite", db_path)
        task = await group.task_store.create_task(TaskCreate(title="Persist me"))
        await group.close()

        reopened = await create_store_group("sqlite", db_path)
        try:
            assert (await reopened.task_store.get_task(task.id)).title == "Persist me"
        finally:
            await reopened.close()


class TestStoreGroup:
    """工厂与演示数据"""

    async def test_backend_from_env(self, monkeypatch):
        monkeypatch.setenv("TASKPILOT_STORE_BACKEND", "memory")
        group = await create_store_group()
        assert group.backend == "memory"
        assert isinstance(group.task_store, InMemoryTaskStore)
        await group.close()

    async def test_seed_demo_tasks_into_sqlite(self, sqlite_store):
        created = await seed_demo_tasks(sqlite_store)
        assert [t.title for t in created] == [
            "Set up the task database",
            "Configure environment variables",
            "Try the AI assistant",
        ]
        assert len(await sqlite_store.list_tasks()) == 3
