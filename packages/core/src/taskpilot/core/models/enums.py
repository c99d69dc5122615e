"""枚举定义

包含 TaskStatus 看板列、TaskPriority 优先级、NotificationLevel 通知级别，
以及看板列的固定展示顺序。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """任务状态 -- 对应看板三列"""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(StrEnum):
    """任务优先级"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class NotificationLevel(StrEnum):
    """瞬时通知级别（对应前端 toast 样式）"""

    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


# 看板列顺序
STATUS_ORDER: list[TaskStatus] = [
    TaskStatus.TODO,
    TaskStatus.IN_PROGRESS,
    TaskStatus.DONE,
]

# 视为高优先级的取值（统计 high_priority 时使用）
HIGH_PRIORITIES: set[TaskPriority] = {TaskPriority.HIGH, TaskPriority.URGENT}

STATUS_LABELS: dict[TaskStatus, str] = {
    TaskStatus.TODO: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.DONE: "Done",
}
