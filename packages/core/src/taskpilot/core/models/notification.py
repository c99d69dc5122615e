"""Notification Domain Model

工具调用和看板操作产生的瞬时通知，与返回给 agent 的结果字符串相互独立。
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from .enums import NotificationLevel


class Notification(BaseModel):
    """瞬时通知"""

    level: NotificationLevel = Field(description="通知级别")
    message: str = Field(description="展示给用户的简短文本")
    source: str = Field(default="board", description="来源：board / 工具名")
    ts: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="时间戳",
    )
