"""NotificationHub -- 内存中的通知广播器

每个 SSE 订阅者持有一个 asyncio.Queue。实现 core 的 Notifier 协议，
工具处理器和 TaskService 通过 notify() 推送通知。
"""

import asyncio

import structlog
from taskpilot.core.models import Notification

log = structlog.get_logger()


class NotificationHub:
    """通知广播器 -- 基于 asyncio.Queue 的发布/订阅"""

    def __init__(self, queue_maxsize: int = 100) -> None:
        self._subscribers: set[asyncio.Queue] = set()
        self._queue_maxsize = queue_maxsize

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def subscribe(self) -> asyncio.Queue:
        """订阅通知流，返回接收通知的队列"""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_maxsize)
        self._subscribers.add(queue)
        return queue

    async def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)

    async def broadcast(self, notification: Notification) -> int:
        """向所有订阅者广播，返回成功投递的订阅者数

        队列已满的订阅者视为失联，直接移除。
        """
        delivered = 0
        dead_queues = []
        for queue in self._subscribers:
            try:
                queue.put_nowait(notification)
                delivered += 1
            except asyncio.QueueFull:
                dead_queues.append(queue)

        for queue in dead_queues:
            self._subscribers.discard(queue)
        if dead_queues:
            await log.awarning("notification_subscribers_dropped", count=len(dead_queues))
        return delivered

    async def notify(self, notification: Notification) -> None:
        delivered = await self.broadcast(notification)
        await log.ainfo(
            "notification",
            level=notification.level.value,
            source=notification.source,
            message=notification.message,
            delivered=delivered,
        )
