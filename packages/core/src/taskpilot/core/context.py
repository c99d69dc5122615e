"""Agent 可读上下文

为聊天 agent 生成任务快照：精简后的任务摘要 + 统计数据。
只读，每次调用基于传入的任务列表重新计算。
"""

from datetime import date

from pydantic import BaseModel, Field

from .models.enums import HIGH_PRIORITIES, TaskPriority, TaskStatus
from .models.task import Task
from .store.clock import utcnow


class TaskDigest(BaseModel):
    """任务摘要（不含时间戳等冗余字段）"""

    id: str
    title: str
    status: TaskStatus
    priority: TaskPriority
    due_date: date | None = None
    parent_id: str | None = None
    is_subtask: bool = False
    subtask_count: int = 0


class TaskStats(BaseModel):
    """看板统计"""

    total: int = 0
    todo: int = 0
    in_progress: int = 0
    done: int = 0
    high_priority: int = Field(default=0, description="high + urgent")
    overdue: int = Field(default=0, description="已过截止日期且未完成")


class TaskContext(BaseModel):
    """agent 可读上下文"""

    tasks: list[TaskDigest] = Field(default_factory=list)
    stats: TaskStats = Field(default_factory=TaskStats)


def build_readable_context(tasks: list[Task], today: date | None = None) -> TaskContext:
    """基于任务列表构建上下文快照

    Args:
        tasks: 当前全部任务
        today: 判定逾期的基准日期，缺省为当前 UTC 日期

    Returns:
        TaskContext
    """
    today = today or utcnow().date()

    subtask_counts: dict[str, int] = {}
    for task in tasks:
        if task.parent_id is not None:
            subtask_counts[task.parent_id] = subtask_counts.get(task.parent_id, 0) + 1

    digests = [
        TaskDigest(
            id=task.id,
            title=task.title,
            status=task.status,
            priority=task.priority,
            due_date=task.due_date,
            parent_id=task.parent_id,
            is_subtask=task.is_subtask,
            subtask_count=subtask_counts.get(task.id, 0),
        )
        for task in tasks
    ]

    stats = TaskStats(
        total=len(tasks),
        todo=sum(1 for t in tasks if t.status == TaskStatus.TODO),
        in_progress=sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS),
        done=sum(1 for t in tasks if t.status == TaskStatus.DONE),
        high_priority=sum(1 for t in tasks if t.priority in HIGH_PRIORITIES),
        overdue=sum(
            1
            for t in tasks
            if t.due_date is not None and t.due_date < today and t.status != TaskStatus.DONE
        ),
    )
    return TaskContext(tasks=digests, stats=stats)
