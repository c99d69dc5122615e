"""Task Domain Model

Task 是系统唯一的持久化实体。parent_id 非空即为子任务，
系统只产生一层子任务（约定，非结构约束）。

TaskUpdate 的三态语义依赖 pydantic 的 model_fields_set：
- 字段未出现：保持不变
- 字段显式为 None：清空（仅 description / due_date 允许）
- 字段有值：覆盖
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from ..config import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH
from ..exceptions import TaskValidationError
from .enums import TaskPriority, TaskStatus

# 更新时不可清空的字段
_NON_NULLABLE_FIELDS = ("title", "status", "priority")


class Task(BaseModel):
    """Task 数据模型"""

    id: str = Field(description="唯一标识，创建时生成，生命周期内不变")
    title: str = Field(description="任务标题")
    description: str | None = Field(default=None, description="任务描述")
    status: TaskStatus = Field(default=TaskStatus.TODO, description="看板状态")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="优先级")
    due_date: date | None = Field(default=None, description="截止日期（仅日期）")
    parent_id: str | None = Field(default=None, description="父任务 ID")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")

    @property
    def is_subtask(self) -> bool:
        return self.parent_id is not None


class TaskWithSubtasks(Task):
    """带子任务列表的父任务（看板分组视图）"""

    subtasks: list[Task] = Field(default_factory=list, description="直接子任务")


class TaskCreate(BaseModel):
    """创建任务输入"""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(description="任务标题，必填")
    description: str | None = Field(default=None, description="任务描述")
    status: TaskStatus = Field(default=TaskStatus.TODO, description="初始状态")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="优先级")
    due_date: date | None = Field(default=None, description="截止日期")
    parent_id: str | None = Field(default=None, description="父任务 ID")


class TaskUpdate(BaseModel):
    """部分更新输入 -- 只有显式设置的字段会被写入"""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: date | None = None

    def changes(self) -> dict:
        """返回显式设置的字段（含显式 None）"""
        return self.model_dump(exclude_unset=True)


class SubtaskSpec(BaseModel):
    """子任务拆解条目"""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)


def check_title(title: str | None) -> str:
    """校验标题：非空且不超过长度上限

    Raises:
        TaskValidationError: 标题为空或过长
    """
    cleaned = (title or "").strip()
    if not cleaned:
        raise TaskValidationError("Task title is required", field="title")
    if len(cleaned) > TITLE_MAX_LENGTH:
        raise TaskValidationError(
            f"Task title must be at most {TITLE_MAX_LENGTH} characters",
            field="title",
        )
    return cleaned


def check_description(description: str | None) -> str | None:
    """校验描述长度（None 与空串均合法且互不等价）"""
    if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
        raise TaskValidationError(
            f"Task description must be at most {DESCRIPTION_MAX_LENGTH} characters",
            field="description",
        )
    return description


def check_create(data: TaskCreate) -> TaskCreate:
    """校验创建输入，返回规整后的副本"""
    return data.model_copy(
        update={
            "title": check_title(data.title),
            "description": check_description(data.description),
        }
    )


def check_update(changes: TaskUpdate) -> dict:
    """校验部分更新输入，返回待写入的字段字典

    Raises:
        TaskValidationError: 不可清空的字段被显式置为 None，或字段值非法
    """
    fields = changes.changes()
    for name in _NON_NULLABLE_FIELDS:
        if name in fields and fields[name] is None:
            raise TaskValidationError(f"Task {name} cannot be cleared", field=name)
    if "title" in fields:
        fields["title"] = check_title(fields["title"])
    if "description" in fields:
        fields["description"] = check_description(fields["description"])
    return fields
