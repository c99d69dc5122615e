"""TaskPilot Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import (
    HIGH_PRIORITIES,
    STATUS_LABELS,
    STATUS_ORDER,
    NotificationLevel,
    TaskPriority,
    TaskStatus,
)
from .notification import Notification
from .task import (
    SubtaskSpec,
    Task,
    TaskCreate,
    TaskUpdate,
    TaskWithSubtasks,
    check_create,
    check_update,
)

__all__ = [
    # 枚举
    "TaskStatus",
    "TaskPriority",
    "NotificationLevel",
    "STATUS_ORDER",
    "STATUS_LABELS",
    "HIGH_PRIORITIES",
    # Task
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskWithSubtasks",
    "SubtaskSpec",
    "check_create",
    "check_update",
    # Notification
    "Notification",
]
