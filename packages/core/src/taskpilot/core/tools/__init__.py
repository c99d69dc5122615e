"""TaskPilot Core Tools -- agent 可调用的任务工具"""

from .handlers import (
    BREAKDOWN_TASK,
    CREATE_TASK,
    DELETE_TASK,
    FIND_TASK,
    MARK_TASK_COMPLETE,
    UPDATE_TASK,
    TaskToolHandlers,
    build_task_registry,
)
from .normalize import (
    is_clear_sentinel,
    normalize_due_date,
    normalize_priority,
    normalize_status,
    parse_subtasks,
)
from .prompts import (
    ASSISTANT_INSTRUCTIONS,
    CHAT_SUGGESTIONS,
    SCOPE_INSTRUCTIONS,
    build_system_prompt,
)
from .registry import ToolHandler, ToolParameter, ToolRegistry, ToolSpec
from .resolution import describe_ambiguous, describe_not_found, resolve_task

__all__ = [
    # 注册表
    "ToolParameter",
    "ToolSpec",
    "ToolRegistry",
    "ToolHandler",
    "build_task_registry",
    "TaskToolHandlers",
    "FIND_TASK",
    "CREATE_TASK",
    "UPDATE_TASK",
    "MARK_TASK_COMPLETE",
    "DELETE_TASK",
    "BREAKDOWN_TASK",
    # 解析与规整
    "resolve_task",
    "describe_not_found",
    "describe_ambiguous",
    "normalize_status",
    "normalize_priority",
    "normalize_due_date",
    "is_clear_sentinel",
    "parse_subtasks",
    # 提示词
    "ASSISTANT_INSTRUCTIONS",
    "SCOPE_INSTRUCTIONS",
    "CHAT_SUGGESTIONS",
    "build_system_prompt",
]
