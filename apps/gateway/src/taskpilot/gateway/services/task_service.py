"""TaskService -- 看板 REST 路由的业务逻辑

包装 TaskStore：补齐存在性检查，每次变更发出一条 board 通知（成功或失败）。
与工具处理器共用同一个 store，UI 与 agent 的修改互相可见。
失败通知发出后异常继续上抛，由 errors.py 转换为 JSON 错误响应。
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from taskpilot.core.exceptions import TaskNotFoundError, TaskPilotError, TaskValidationError
from taskpilot.core.models import (
    Notification,
    NotificationLevel,
    SubtaskSpec,
    Task,
    TaskCreate,
    TaskStatus,
    TaskUpdate,
    TaskWithSubtasks,
)
from taskpilot.core.notify import Notifier
from taskpilot.core.projection import group_with_subtasks
from taskpilot.core.store import TaskStore, seed_demo_tasks

log = structlog.get_logger()


class TaskService:
    """看板业务服务"""

    def __init__(self, store: TaskStore, notifier: Notifier) -> None:
        self._store = store
        self._notifier = notifier

    async def _notify(self, level: NotificationLevel, message: str) -> None:
        await self._notifier.notify(Notification(level=level, message=message))

    @asynccontextmanager
    async def _reporting(self, verb: str) -> AsyncIterator[None]:
        """变更失败时发出 error 通知后原样上抛"""
        try:
            yield
        except TaskPilotError as exc:
            await log.awarning("board_action_failed", action=verb, error=type(exc).__name__)
            message = f"Failed to {verb}"
            if isinstance(exc, TaskValidationError):
                message += f": {exc.message}"
            await self._notify(NotificationLevel.ERROR, message)
            raise

    async def list_tasks(self) -> list[Task]:
        return await self._store.list_tasks()

    async def board(self) -> dict[TaskStatus, list[Task | TaskWithSubtasks]]:
        return group_with_subtasks(await self._store.list_tasks())

    async def get_task(self, task_id: str) -> Task:
        task = await self._store.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def create_task(self, data: TaskCreate) -> Task:
        """创建任务；指定 parent_id 时父任务必须存在"""
        async with self._reporting("create task"):
            if data.parent_id is not None:
                await self.get_task(data.parent_id)
            task = await self._store.create_task(data)
        await self._notify(NotificationLevel.SUCCESS, f"Task created: {task.title}")
        return task

    async def update_task(self, task_id: str, changes: TaskUpdate) -> Task:
        async with self._reporting("update task"):
            task = await self._store.update_task(task_id, changes)
        await self._notify(NotificationLevel.SUCCESS, f"Task updated: {task.title}")
        return task

    async def delete_task(self, task_id: str) -> list[str]:
        """级联删除任务，返回被删除的 ID（父任务在首位）"""
        async with self._reporting("delete task"):
            task = await self.get_task(task_id)
            removed = await self._store.delete_task(task_id)
            if not removed:
                # 读取与删除之间已被其他调用方删除
                raise TaskNotFoundError(task_id)
        await self._notify(NotificationLevel.SUCCESS, f"Task deleted: {task.title}")
        return removed

    async def create_subtasks(self, parent_id: str, items: list[SubtaskSpec]) -> list[Task]:
        async with self._reporting("add subtasks"):
            children = await self._store.create_subtasks(parent_id, items)
        await self._notify(
            NotificationLevel.SUCCESS,
            f"Added {len(children)} subtasks",
        )
        return children

    async def seed(self) -> list[Task]:
        """插入演示任务"""
        async with self._reporting("add demo tasks"):
            tasks = await seed_demo_tasks(self._store)
        await self._notify(NotificationLevel.INFO, f"Added {len(tasks)} demo tasks")
        return tasks
