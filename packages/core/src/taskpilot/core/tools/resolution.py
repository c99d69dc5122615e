"""任务标识符解析

agent 可能传入精确 id，也可能传入标题片段。解析顺序：
1. 精确 id 匹配
2. 标题大小写不敏感的子串匹配：0 个 -> 未找到，1 个 -> 命中，多个 -> 歧义
"""

from ..config import CANDIDATE_SAMPLE_SIZE
from ..exceptions import AmbiguousTaskError, TaskNotFoundError, TaskValidationError
from ..models.task import Task


def resolve_task(identifier: str | None, tasks: list[Task]) -> Task:
    """将标识符解析为唯一任务

    Args:
        identifier: 任务 id 或标题片段
        tasks: 当前任务快照

    Returns:
        命中的任务

    Raises:
        TaskValidationError: 标识符为空
        TaskNotFoundError: 无匹配（附带少量候选任务）
        AmbiguousTaskError: 多个标题匹配
    """
    needle = (identifier or "").strip()
    if not needle:
        raise TaskValidationError("A task id or title is required", field="id")

    for task in tasks:
        if task.id == needle:
            return task

    lowered = needle.lower()
    matches = [task for task in tasks if lowered in task.title.lower()]
    if not matches:
        raise TaskNotFoundError(needle, candidates=tasks[:CANDIDATE_SAMPLE_SIZE])
    if len(matches) > 1:
        raise AmbiguousTaskError(needle, matches)
    return matches[0]


def format_task_ref(task: Task) -> str:
    return f'"{task.title}" (id: {task.id})'


def describe_not_found(exc: TaskNotFoundError) -> str:
    """未找到时给 agent 的提示，列出部分现有任务"""
    if not exc.candidates:
        return f'No task matches "{exc.identifier}". The board has no tasks yet.'
    sample = ", ".join(format_task_ref(task) for task in exc.candidates)
    return (
        f'No task matches "{exc.identifier}". '
        f"Some existing tasks: {sample}. "
        "Use findTask with a different title, or pass an exact id."
    )


def describe_ambiguous(exc: AmbiguousTaskError) -> str:
    """歧义时列出全部匹配项，引导 agent 向用户确认"""
    listed = ", ".join(format_task_ref(task) for task in exc.matches)
    return (
        f'Multiple tasks match "{exc.identifier}": {listed}. '
        "Ask the user which one they mean, then call again with the exact id."
    )
