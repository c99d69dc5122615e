"""TaskStore SQLite 实现

持久化后端。所有写操作在事务内提交，失败时回滚；
驱动层异常统一包装为 BackendError，原始异常只进入服务端日志。
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any

import aiosqlite
import structlog

from ..exceptions import BackendError, TaskNotFoundError, TaskValidationError
from ..models.enums import TaskPriority, TaskStatus
from ..models.task import (
    SubtaskSpec,
    Task,
    TaskCreate,
    TaskUpdate,
    check_create,
    check_update,
)
from .clock import new_task_id, to_db_timestamp, touch, utcnow

log = structlog.get_logger()

_COLUMNS = (
    "id",
    "title",
    "description",
    "status",
    "priority",
    "due_date",
    "parent_id",
    "created_at",
    "updated_at",
)

_INSERT_SQL = (
    f"INSERT INTO tasks ({', '.join(_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in _COLUMNS)})"
)


def _to_column(value: Any) -> Any:
    """将模型字段值转换为 SQLite 列值"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return to_db_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    @asynccontextmanager
    async def _reading(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except aiosqlite.Error as exc:
            await log.aerror("task_store_read_failed", operation=operation, error=str(exc))
            raise BackendError(operation) from exc

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[None]:
        """写事务：成功提交，任何异常回滚"""
        try:
            yield
            await self._conn.commit()
        except aiosqlite.Error as exc:
            await self._conn.rollback()
            await log.aerror("task_store_write_failed", operation=operation, error=str(exc))
            raise BackendError(operation) from exc
        except Exception:
            await self._conn.rollback()
            raise

    async def list_tasks(self) -> list[Task]:
        """查询全部任务，按 created_at 倒序"""
        async with self._reading("load tasks"):
            cursor = await self._conn.execute(
                "SELECT * FROM tasks ORDER BY created_at DESC, id DESC"
            )
            rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def get_task(self, task_id: str) -> Task | None:
        """根据 id 查询任务"""
        async with self._reading("load task"):
            cursor = await self._conn.execute(
                "SELECT * FROM tasks WHERE id = ?",
                (task_id,),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def create_task(self, data: TaskCreate) -> Task:
        """创建任务

        Raises:
            TaskValidationError: 标题为空或字段超长
            BackendError: 写入失败
        """
        data = check_create(data)
        now = utcnow()
        task = Task(id=new_task_id(), created_at=now, updated_at=now, **data.model_dump())
        async with self._transaction("create task"):
            await self._conn.execute(_INSERT_SQL, self._task_to_row(task))

        await log.ainfo("task_created", task_id=task.id, backend="sqlite")
        return task

    async def update_task(self, task_id: str, changes: TaskUpdate) -> Task:
        """部分更新任务

        Raises:
            TaskNotFoundError: 任务不存在
            TaskValidationError: 不可清空的字段被置空
        """
        fields = check_update(changes)
        current = await self.get_task(task_id)
        if current is None:
            raise TaskNotFoundError(task_id)

        fields["updated_at"] = touch(current.updated_at)
        assignments = ", ".join(f"{name} = ?" for name in fields)
        params = [_to_column(value) for value in fields.values()]
        async with self._transaction("update task"):
            await self._conn.execute(
                f"UPDATE tasks SET {assignments} WHERE id = ?",
                (*params, task_id),
            )

        await log.ainfo(
            "task_updated",
            task_id=task_id,
            fields=sorted(name for name in fields if name != "updated_at"),
        )
        return current.model_copy(update=fields)

    async def delete_task(self, task_id: str) -> list[str]:
        """删除任务及其直接子任务

        Raises:
            TaskNotFoundError: 任务不存在
        """
        async with self._reading("load task"):
            cursor = await self._conn.execute(
                "SELECT id FROM tasks WHERE id = ? OR parent_id = ? "
                "ORDER BY created_at DESC, id DESC",
                (task_id, task_id),
            )
            rows = await cursor.fetchall()
        ids = [row[0] for row in rows]
        if task_id not in ids:
            raise TaskNotFoundError(task_id)

        async with self._transaction("delete task"):
            await self._conn.execute(
                "DELETE FROM tasks WHERE id = ? OR parent_id = ?",
                (task_id, task_id),
            )

        # 被删除的父任务排在首位
        removed = [task_id] + [i for i in ids if i != task_id]
        await log.ainfo("task_deleted", task_id=task_id, removed_count=len(removed))
        return removed

    async def create_subtasks(
        self,
        parent_id: str,
        items: list[SubtaskSpec],
    ) -> list[Task]:
        """在单个事务内批量插入子任务

        状态固定为 todo，优先级固定为 medium。

        Raises:
            TaskValidationError: items 为空
            TaskNotFoundError: 父任务不存在
        """
        if not items:
            raise TaskValidationError("At least one subtask is required", field="subtasks")
        if await self.get_task(parent_id) is None:
            raise TaskNotFoundError(parent_id)

        now = utcnow()
        children = [
            Task(
                id=new_task_id(),
                title=item.title,
                description=item.description,
                status=TaskStatus.TODO,
                priority=TaskPriority.MEDIUM,
                parent_id=parent_id,
                # 逐条错开一微秒，保持插入顺序可排序
                created_at=now + timedelta(microseconds=offset),
                updated_at=now + timedelta(microseconds=offset),
            )
            for offset, item in enumerate(items)
        ]
        async with self._transaction("create subtasks"):
            await self._conn.executemany(
                _INSERT_SQL,
                [self._task_to_row(child) for child in children],
            )

        await log.ainfo("subtasks_created", parent_id=parent_id, count=len(children))
        return children

    async def close(self) -> None:
        await self._conn.close()

    @staticmethod
    def _task_to_row(task: Task) -> tuple:
        return tuple(_to_column(getattr(task, name)) for name in _COLUMNS)

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            status=row["status"],
            priority=row["priority"],
            due_date=date.fromisoformat(row["due_date"]) if row["due_date"] else None,
            parent_id=row["parent_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
