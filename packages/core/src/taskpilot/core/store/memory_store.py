"""TaskStore 内存实现 -- 演示模式

进程内字典存储，不做并发同步，仅在单个事件循环内使用。
与 SQLite 后端的唯一行为差异：删除不存在的任务时静默返回空列表。
"""

from datetime import timedelta

import structlog

from ..exceptions import TaskNotFoundError, TaskValidationError
from ..models.enums import TaskPriority, TaskStatus
from ..models.task import (
    SubtaskSpec,
    Task,
    TaskCreate,
    TaskUpdate,
    check_create,
    check_update,
)
from .clock import new_task_id, touch, utcnow
from .seed import demo_tasks

log = structlog.get_logger()


class InMemoryTaskStore:
    """TaskStore 的内存实现"""

    def __init__(self, seed: bool = True) -> None:
        self._tasks: dict[str, Task] = {}
        if seed:
            for task in demo_tasks():
                self._tasks[task.id] = task

    async def list_tasks(self) -> list[Task]:
        return sorted(
            self._tasks.values(),
            key=lambda t: (t.created_at, t.id),
            reverse=True,
        )

    async def get_task(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    async def create_task(self, data: TaskCreate) -> Task:
        data = check_create(data)
        now = utcnow()
        task = Task(id=new_task_id(), created_at=now, updated_at=now, **data.model_dump())
        self._tasks[task.id] = task
        await log.ainfo("task_created", task_id=task.id, backend="memory")
        return task

    async def update_task(self, task_id: str, changes: TaskUpdate) -> Task:
        fields = check_update(changes)
        current = self._tasks.get(task_id)
        if current is None:
            raise TaskNotFoundError(task_id)

        fields["updated_at"] = touch(current.updated_at)
        updated = current.model_copy(update=fields)
        self._tasks[task_id] = updated
        await log.ainfo(
            "task_updated",
            task_id=task_id,
            fields=sorted(name for name in fields if name != "updated_at"),
        )
        return updated

    async def delete_task(self, task_id: str) -> list[str]:
        """删除任务及其直接子任务；任务不存在时返回空列表"""
        if task_id not in self._tasks:
            return []
        children = [t.id for t in await self.list_tasks() if t.parent_id == task_id]
        removed = [task_id, *children]
        for removed_id in removed:
            del self._tasks[removed_id]
        await log.ainfo("task_deleted", task_id=task_id, removed_count=len(removed))
        return removed

    async def create_subtasks(
        self,
        parent_id: str,
        items: list[SubtaskSpec],
    ) -> list[Task]:
        """全部条目构造成功后才写入，保证全有或全无"""
        if not items:
            raise TaskValidationError("At least one subtask is required", field="subtasks")
        if parent_id not in self._tasks:
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
                created_at=now + timedelta(microseconds=offset),
                updated_at=now + timedelta(microseconds=offset),
            )
            for offset, item in enumerate(items)
        ]
        for child in children:
            self._tasks[child.id] = child
        await log.ainfo("subtasks_created", parent_id=parent_id, count=len(children))
        return children

    async def close(self) -> None:
        self._tasks.clear()
