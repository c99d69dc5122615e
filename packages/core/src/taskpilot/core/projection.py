"""Task Projection -- 看板视图投影

将扁平任务列表投影为按状态分列的看板视图。纯函数，不访问存储。
"""

from .models.enums import STATUS_ORDER, TaskStatus
from .models.task import Task, TaskWithSubtasks


def _empty_board() -> dict:
    return {status: [] for status in STATUS_ORDER}


def group_by_status(tasks: list[Task]) -> dict[TaskStatus, list[Task]]:
    """按状态分桶，保持输入的相对顺序

    三个状态桶总是存在（可能为空列表）。
    """
    board: dict[TaskStatus, list[Task]] = _empty_board()
    for task in tasks:
        board[task.status].append(task)
    return board


def group_with_subtasks(
    tasks: list[Task],
) -> dict[TaskStatus, list[Task | TaskWithSubtasks]]:
    """只将顶层任务分桶，子任务挂到父任务下

    有子任务的父任务变为 TaskWithSubtasks（子任务按输入顺序排列）；
    没有子任务的父任务保持 Task 原样。父任务不在输入中的子任务不会出现在看板上。
    """
    children: dict[str, list[Task]] = {}
    for task in tasks:
        if task.parent_id is not None:
            children.setdefault(task.parent_id, []).append(task)

    board: dict[TaskStatus, list[Task | TaskWithSubtasks]] = _empty_board()
    for task in tasks:
        if task.parent_id is not None:
            continue
        subtasks = children.get(task.id)
        if subtasks:
            board[task.status].append(
                TaskWithSubtasks(**task.model_dump(), subtasks=subtasks)
            )
        else:
            board[task.status].append(task)
    return board
