"""通知端口

工具处理器通过 Notifier 协议发出瞬时通知。Core 只定义协议和日志实现，
gateway 提供基于 SSE 的广播实现。
"""

from typing import Protocol

import structlog

from .models.notification import Notification

log = structlog.get_logger()


class Notifier(Protocol):
    """通知发送接口"""

    async def notify(self, notification: Notification) -> None: ...


class LogNotifier:
    """仅写日志的 Notifier（CLI 和无前端场景）"""

    async def notify(self, notification: Notification) -> None:
        await log.ainfo(
            "notification",
            level=notification.level.value,
            source=notification.source,
            message=notification.message,
        )

