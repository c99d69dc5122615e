"""SSE 通知流路由

GET /api/stream/notifications: 推送工具调用和看板操作产生的通知，空闲时发送心跳。
"""

import asyncio
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse
from taskpilot.core.config import SSE_HEARTBEAT_INTERVAL

from ..deps import get_notification_hub
from ..services.notification_hub import NotificationHub

router = APIRouter()


async def notification_events(
    hub: NotificationHub,
    heartbeat_interval: float = SSE_HEARTBEAT_INTERVAL,
) -> AsyncIterator[dict]:
    """订阅 hub 并逐条产出 SSE 事件；生成器关闭时取消订阅"""
    queue = await hub.subscribe()
    try:
        while True:
            try:
                notification = await asyncio.wait_for(queue.get(), timeout=heartbeat_interval)
                yield {
                    "event": "notification",
                    "data": notification.model_dump_json(),
                }
            except TimeoutError:
                yield {"comment": "heartbeat"}
    finally:
        await hub.unsubscribe(queue)


@router.get("/api/stream/notifications")
async def stream_notifications(hub: NotificationHub = Depends(get_notification_hub)):
    return EventSourceResponse(notification_events(hub))
