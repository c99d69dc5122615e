"""演示数据

内存后端启动时自带三条演示任务；seed_demo_tasks 可向任意后端写入同样的内容。
"""

from datetime import datetime, timedelta

import structlog

from ..models.enums import TaskPriority, TaskStatus
from ..models.task import Task, TaskCreate
from .clock import utcnow
from .protocols import TaskStore

log = structlog.get_logger()


def _demo_inputs(today) -> list[tuple[str, TaskCreate]]:
    return [
        (
            "demo-1",
            TaskCreate(
                title="Set up the task database",
                description="Create the tasks table and point the app at it",
                priority=TaskPriority.HIGH,
                status=TaskStatus.TODO,
            ),
        ),
        (
            "demo-2",
            TaskCreate(
                title="Configure environment variables",
                description="Add the database and LLM proxy settings to the environment",
                priority=TaskPriority.URGENT,
                status=TaskStatus.TODO,
                due_date=today + timedelta(days=1),
            ),
        ),
        (
            "demo-3",
            TaskCreate(
                title="Try the AI assistant",
                description="Ask the assistant to create or update a task",
                priority=TaskPriority.MEDIUM,
                status=TaskStatus.IN_PROGRESS,
            ),
        ),
    ]


def demo_tasks(now: datetime | None = None) -> list[Task]:
    """构造带固定 id（demo-1..3）的演示任务，demo-1 最早创建"""
    now = now or utcnow()
    inputs = _demo_inputs(now.date())
    tasks = []
    for index, (task_id, data) in enumerate(inputs):
        created_at = now - timedelta(minutes=len(inputs) - index)
        tasks.append(
            Task(
                id=task_id,
                created_at=created_at,
                updated_at=created_at,
                **data.model_dump(),
            )
        )
    return tasks


async def seed_demo_tasks(store: TaskStore) -> list[Task]:
    """向 store 写入演示任务（由 store 分配新 id）

    Returns:
        新创建的任务列表
    """
    created = []
    for _, data in _demo_inputs(utcnow().date()):
        created.append(await store.create_task(data))
    await log.ainfo("demo_tasks_seeded", count=len(created))
    return created
