"""任务工具处理器

六个工具共用同一流程：解析标识符 -> 规整参数 -> 至多一次 store 变更
-> 返回简短英文结果 -> 发出一条通知。

解析、校验、后端及意外异常都在 _run 中统一转换为结果字符串和 error 通知，
后端细节只写日志。
"""

from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from ..exceptions import (
    AmbiguousTaskError,
    BackendError,
    TaskNotFoundError,
    TaskValidationError,
)
from ..models.enums import NotificationLevel, TaskPriority, TaskStatus
from ..models.notification import Notification
from ..models.task import Task, TaskCreate, TaskUpdate
from ..notify import LogNotifier, Notifier
from ..store.protocols import TaskStore
from .normalize import (
    is_clear_sentinel,
    normalize_due_date,
    normalize_priority,
    normalize_status,
    parse_subtasks,
)
from .registry import ToolParameter, ToolRegistry, ToolSpec
from .resolution import describe_ambiguous, describe_not_found, resolve_task

log = structlog.get_logger()

_ID_PARAM = ToolParameter(
    name="id",
    description="The exact task id from findTask (a title fragment also works if unique)",
    required=True,
)

_SUBTASK_ITEMS = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "description": {"type": "string"},
    },
    "required": ["title"],
}

FIND_TASK = ToolSpec(
    name="findTask",
    description=(
        "Find a task by title or id. Use this first to get the exact task id "
        "before updating, completing, deleting or breaking down a task."
    ),
    parameters=[
        ToolParameter(
            name="query",
            description="The task title (or part of it) or the task id",
            required=True,
        ),
    ],
)

CREATE_TASK = ToolSpec(
    name="createTask",
    description="Create a new task. Always confirm with the user before creating.",
    parameters=[
        ToolParameter(name="title", description="The task title", required=True),
        ToolParameter(name="description", description="Optional task description"),
        ToolParameter(name="priority", description="Priority: low, medium, high, or urgent"),
        ToolParameter(name="status", description="Status: todo, in_progress, or done"),
        ToolParameter(name="dueDate", description="Optional due date, e.g. 2025-03-05 or tomorrow"),
    ],
)

UPDATE_TASK = ToolSpec(
    name="updateTask",
    description=(
        "Update fields of an existing task. Only the fields you pass change. "
        'Pass an empty string or "null" for description or dueDate to clear them.'
    ),
    parameters=[
        _ID_PARAM,
        ToolParameter(name="title", description="New title"),
        ToolParameter(name="description", description="New description"),
        ToolParameter(name="status", description="New status: todo, in_progress, or done"),
        ToolParameter(name="priority", description="New priority: low, medium, high, or urgent"),
        ToolParameter(name="dueDate", description="New due date"),
    ],
)

MARK_TASK_COMPLETE = ToolSpec(
    name="markTaskComplete",
    description="Mark a task as complete. Ask for confirmation before marking.",
    parameters=[_ID_PARAM],
)

DELETE_TASK = ToolSpec(
    name="deleteTask",
    description=(
        "Delete a task and its subtasks. Always ask for confirmation before deleting."
    ),
    parameters=[_ID_PARAM],
)

BREAKDOWN_TASK = ToolSpec(
    name="breakdownTask",
    description=(
        "Break a task into smaller subtasks. Always show the subtasks to the user "
        "and ask for confirmation before creating them."
    ),
    parameters=[
        _ID_PARAM,
        ToolParameter(
            name="subtasks",
            type="array",
            description="Subtasks, each with a title and an optional description",
            required=True,
            items=_SUBTASK_ITEMS,
        ),
    ],
)


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _is_blank(value: Any) -> bool:
    return not _text(value)


def _describe(task: Task) -> str:
    parts = [
        f"id: {task.id}",
        f"status: {task.status.value}",
        f"priority: {task.priority.value}",
        f"due: {task.due_date.isoformat() if task.due_date else 'none'}",
    ]
    if task.parent_id:
        parts.append(f"subtask of: {task.parent_id}")
    return f'"{task.title}" ({", ".join(parts)})'


def _show(value: Any) -> str:
    if value is None:
        return "none"
    if isinstance(value, TaskStatus | TaskPriority):
        return value.value
    return str(value)


class TaskToolHandlers:
    """六个任务工具的实现，共享同一个 store 和 notifier"""

    def __init__(self, store: TaskStore, notifier: Notifier) -> None:
        self._store = store
        self._notifier = notifier

    async def _notify(self, level: NotificationLevel, message: str, source: str) -> None:
        await self._notifier.notify(Notification(level=level, message=message, source=source))

    async def _run(
        self,
        tool: str,
        verb: str,
        action: Callable[[], Awaitable[tuple[str, NotificationLevel, str]]],
    ) -> str:
        """执行 action 并统一处理异常

        action 返回 (结果字符串, 通知级别, 通知文本)。
        """
        try:
            result, level, toast = await action()
        except TaskNotFoundError as exc:
            result, level, toast = describe_not_found(exc), NotificationLevel.ERROR, "Task not found"
        except AmbiguousTaskError as exc:
            result = describe_ambiguous(exc)
            level, toast = NotificationLevel.ERROR, f"{len(exc.matches)} tasks match"
        except TaskValidationError as exc:
            result = f"Could not {verb}: {exc.message}."
            level, toast = NotificationLevel.ERROR, f"Failed to {verb}"
        except BackendError as exc:
            await log.aerror("tool_store_failed", tool=tool, operation=exc.operation)
            result = f"Failed to {verb}. Please try again."
            level, toast = NotificationLevel.ERROR, f"Failed to {verb}"
        except Exception:
            await log.aexception("tool_handler_failed", tool=tool)
            result = f"Failed to {verb}. Please try again."
            level, toast = NotificationLevel.ERROR, f"Failed to {verb}"

        await self._notify(level, toast, tool)
        return result

    async def find_task(self, args: dict[str, Any], tasks: list[Task]) -> str:
        async def action():
            task = resolve_task(_text(args.get("query")), tasks)
            return f"Found task {_describe(task)}.", NotificationLevel.INFO, f"Found: {task.title}"

        return await self._run("findTask", "find the task", action)

    async def create_task(self, args: dict[str, Any], tasks: list[Task]) -> str:
        async def action():
            description = args.get("description")
            raw_due = args.get("dueDate")
            due_date = None if is_clear_sentinel(raw_due) else normalize_due_date(raw_due)

            task = await self._store.create_task(
                TaskCreate(
                    title=_text(args.get("title")),
                    description=None if is_clear_sentinel(description) else _text(description),
                    priority=normalize_priority(args.get("priority")) or TaskPriority.MEDIUM,
                    status=normalize_status(args.get("status")) or TaskStatus.TODO,
                    due_date=due_date,
                )
            )
            result = f"Created task {_describe(task)}."
            if due_date is None and not is_clear_sentinel(raw_due):
                result += f' The due date "{raw_due}" was not understood, so none was set.'
            return result, NotificationLevel.SUCCESS, f"Created task: {task.title}"

        return await self._run("createTask", "create the task", action)

    def _collect_update(self, args: dict[str, Any]) -> tuple[dict[str, Any], list[str]]:
        """把工具参数转换为 TaskUpdate 字段（三态：缺省 / 清空 / 赋值）

        无法识别的 status / priority / dueDate 只跳过该字段，其余字段照常更新。

        Returns:
            (字段, 被忽略字段的说明)
        """
        fields: dict[str, Any] = {}
        ignored: list[str] = []

        # 空白标题视为未提供
        title = _text(args.get("title"))
        if title:
            fields["title"] = title

        if "description" in args:
            description = args["description"]
            fields["description"] = None if is_clear_sentinel(description) else _text(description)

        if "status" in args and not _is_blank(args["status"]):
            status = normalize_status(args["status"])
            if status is None:
                ignored.append(
                    f'unknown status "{args["status"]}" (use todo, in_progress, or done)'
                )
            else:
                fields["status"] = status

        if "priority" in args and not _is_blank(args["priority"]):
            priority = normalize_priority(args["priority"])
            if priority is None:
                ignored.append(
                    f'unknown priority "{args["priority"]}" (use low, medium, high, or urgent)'
                )
            else:
                fields["priority"] = priority

        if "dueDate" in args:
            raw_due = args["dueDate"]
            if is_clear_sentinel(raw_due):
                fields["due_date"] = None
            else:
                due_date = normalize_due_date(raw_due)
                if due_date is None:
                    ignored.append(f'due date "{raw_due}" was not understood')
                else:
                    fields["due_date"] = due_date
        return fields, ignored

    async def update_task(self, args: dict[str, Any], tasks: list[Task]) -> str:
        async def action():
            task = resolve_task(_text(args.get("id")), tasks)
            requested, ignored = self._collect_update(args)
            note = f" Ignored: {'; '.join(ignored)}." if ignored else ""
            changed = {
                name: value for name, value in requested.items() if getattr(task, name) != value
            }
            if not changed:
                return (
                    f'No changes made to "{task.title}"; it already matches.{note}',
                    NotificationLevel.INFO,
                    f"No changes to {task.title}",
                )

            updated = await self._store.update_task(task.id, TaskUpdate(**changed))
            summary = "; ".join(
                f"{name}: {_show(getattr(task, name))} -> {_show(getattr(updated, name))}"
                for name in changed
            )
            return (
                f'Updated "{updated.title}" (id: {updated.id}): {summary}.{note}',
                NotificationLevel.SUCCESS,
                f"Updated task: {updated.title}",
            )

        return await self._run("updateTask", "update the task", action)

    async def mark_task_complete(self, args: dict[str, Any], tasks: list[Task]) -> str:
        async def action():
            task = resolve_task(_text(args.get("id")), tasks)
            if task.status == TaskStatus.DONE:
                return (
                    f'"{task.title}" is already complete.',
                    NotificationLevel.INFO,
                    f"Already done: {task.title}",
                )
            await self._store.update_task(task.id, TaskUpdate(status=TaskStatus.DONE))
            return (
                f'Marked "{task.title}" as complete.',
                NotificationLevel.SUCCESS,
                f"Completed: {task.title}",
            )

        return await self._run("markTaskComplete", "mark the task complete", action)

    async def delete_task(self, args: dict[str, Any], tasks: list[Task]) -> str:
        async def action():
            task = resolve_task(_text(args.get("id")), tasks)
            removed = await self._store.delete_task(task.id)
            if not removed:
                return (
                    f'"{task.title}" was already deleted.',
                    NotificationLevel.INFO,
                    f"Already deleted: {task.title}",
                )
            subtask_count = len(removed) - 1
            result = f'Deleted "{task.title}"'
            if subtask_count:
                noun = "subtask" if subtask_count == 1 else "subtasks"
                result += f" and {subtask_count} {noun}"
            return result + ".", NotificationLevel.SUCCESS, f"Deleted task: {task.title}"

        return await self._run("deleteTask", "delete the task", action)

    async def breakdown_task(self, args: dict[str, Any], tasks: list[Task]) -> str:
        async def action():
            parent = resolve_task(_text(args.get("id")), tasks)
            if parent.is_subtask:
                raise TaskValidationError(
                    f'"{parent.title}" is itself a subtask; break down its parent task instead',
                    field="id",
                )
            items = parse_subtasks(args.get("subtasks"))
            children = await self._store.create_subtasks(parent.id, items)
            titles = ", ".join(f'"{child.title}"' for child in children)
            return (
                f'Created {len(children)} subtasks for "{parent.title}": {titles}.',
                NotificationLevel.SUCCESS,
                f"Created {len(children)} subtasks for {parent.title}",
            )

        return await self._run("breakdownTask", "create subtasks", action)


def build_task_registry(store: TaskStore, notifier: Notifier | None = None) -> ToolRegistry:
    """注册六个任务工具

    Args:
        store: 任务存储（与 UI 共用）
        notifier: 通知发送方，缺省只写日志
    """
    notifier = notifier or LogNotifier()
    handlers = TaskToolHandlers(store, notifier)
    registry = ToolRegistry(snapshot=store.list_tasks, notifier=notifier)
    registry.register(FIND_TASK, handlers.find_task)
    registry.register(CREATE_TASK, handlers.create_task)
    registry.register(UPDATE_TASK, handlers.update_task)
    registry.register(MARK_TASK_COMPLETE, handlers.mark_task_complete)
    registry.register(DELETE_TASK, handlers.delete_task)
    registry.register(BREAKDOWN_TASK, handlers.breakdown_task)
    return registry
