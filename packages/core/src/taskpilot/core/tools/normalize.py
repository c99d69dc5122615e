"""工具参数规整

agent 传入的参数是自由文本：状态、优先级、日期写法不一，子任务列表可能是
JSON 字符串。此模块把它们转换为领域类型，无法识别时返回 None 或抛出
TaskValidationError，由调用方决定是回退默认值还是拒绝。
"""

import json
import re
from datetime import date, datetime, timedelta
from typing import Any

from pydantic import ValidationError

from ..exceptions import TaskValidationError
from ..models.enums import TaskPriority, TaskStatus
from ..models.task import SubtaskSpec

_SEPARATORS = re.compile(r"[\s\-]+")

_STATUS_ALIASES = {
    "to_do": TaskStatus.TODO,
    "completed": TaskStatus.DONE,
}

# 依次尝试的日期格式（ISO 形式单独处理）
_DATE_FORMATS = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)

_CLEAR_SENTINELS = {"", "null", "none"}


def normalize_status(raw: Any) -> TaskStatus | None:
    """规整状态文本：小写、去空白、空白或连字符折叠为下划线

    >>> normalize_status("In-Progress")
    <TaskStatus.IN_PROGRESS: 'in_progress'>
    """
    if raw is None:
        return None
    key = _SEPARATORS.sub("_", str(raw).strip().lower())
    if key in _STATUS_ALIASES:
        return _STATUS_ALIASES[key]
    try:
        return TaskStatus(key)
    except ValueError:
        return None


def normalize_priority(raw: Any) -> TaskPriority | None:
    """规整优先级文本，无法识别返回 None"""
    if raw is None:
        return None
    try:
        return TaskPriority(str(raw).strip().lower())
    except ValueError:
        return None


def normalize_due_date(raw: Any, today: date | None = None) -> date | None:
    """解析截止日期，返回日历日期（丢弃时间部分）

    支持 ISO 日期/时间（含 Z 后缀）、YYYY/MM/DD、MM/DD/YYYY、
    "March 5, 2025"、"5 March 2025"，以及 today / tomorrow。

    Args:
        raw: agent 传入的日期文本
        today: 相对日期的基准，缺省为本地当天

    Returns:
        date，无法解析时为 None
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw

    text = str(raw).strip()
    if not text:
        return None

    lowered = text.lower()
    if lowered in ("today", "tomorrow"):
        base = today or date.today()
        return base if lowered == "today" else base + timedelta(days=1)

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def is_clear_sentinel(raw: Any) -> bool:
    """判断参数是否表示"清空"（None、空串、"null"、"none"）"""
    if raw is None:
        return True
    return isinstance(raw, str) and raw.strip().lower() in _CLEAR_SENTINELS


def parse_subtasks(raw: Any) -> list[SubtaskSpec]:
    """解析子任务列表

    接受列表或编码列表的 JSON 字符串；字符串条目等价于 {"title": 条目}。

    Raises:
        TaskValidationError: 无法解析、不是列表、列表为空，或任一条目缺少标题
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise TaskValidationError(
                "Subtasks must be a JSON list of objects with a title",
                field="subtasks",
            ) from exc

    if not isinstance(raw, list):
        raise TaskValidationError(
            "Subtasks must be a list of objects with a title",
            field="subtasks",
        )
    if not raw:
        raise TaskValidationError("At least one subtask is required", field="subtasks")

    items: list[SubtaskSpec] = []
    for index, item in enumerate(raw, start=1):
        if isinstance(item, str):
            item = {"title": item}
        if not isinstance(item, dict):
            raise TaskValidationError(
                f"Subtask {index} must be an object with a title",
                field="subtasks",
            )

        title = item.get("title")
        if not isinstance(title, str) or not title.strip():
            raise TaskValidationError(f"Subtask {index} is missing a title", field="subtasks")

        description = item.get("description")
        if description is not None and not isinstance(description, str):
            description = str(description)
        try:
            items.append(SubtaskSpec(title=title, description=description or None))
        except ValidationError as exc:
            raise TaskValidationError(
                f"Subtask {index} is invalid: {exc.errors()[0]['msg']}",
                field="subtasks",
            ) from exc
    return items
