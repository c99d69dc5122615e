"""TaskPilot Core 异常体系

ValidationError / NotFoundError / AmbiguousError / BackendError 四类，
在发生的边界处被消化：工具层转为字符串，REST 层转为错误 JSON。
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.task import Task


class TaskPilotError(Exception):
    """Core 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 调用方是否可通过修正输入后重试恢复
        """
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable


class TaskValidationError(TaskPilotError):
    """输入缺失或格式错误（空标题、无法解析的子任务列表等）"""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, recoverable=True)
        self.field = field


class TaskNotFoundError(TaskPilotError):
    """标识符无法解析到任何任务

    candidates 携带少量现有任务，供调用方提示用户。
    """

    def __init__(
        self,
        identifier: str,
        candidates: list["Task"] | None = None,
    ) -> None:
        super().__init__(f"Task not found: {identifier}", recoverable=True)
        self.identifier = identifier
        self.candidates = list(candidates or [])


class AmbiguousTaskError(TaskPilotError):
    """标识符匹配到多个任务"""

    def __init__(self, identifier: str, matches: list["Task"]) -> None:
        super().__init__(
            f"Identifier {identifier!r} matches {len(matches)} tasks",
            recoverable=True,
        )
        self.identifier = identifier
        self.matches = list(matches)


class BackendError(TaskPilotError):
    """存储后端操作失败（网络、约束冲突、驱动错误）

    原始异常保留在 __cause__ 中，仅用于服务端日志。
    """

    def __init__(self, operation: str) -> None:
        super().__init__(f"Task store failed to {operation}", recoverable=False)
        self.operation = operation
