"""NotificationHub + SSE 通知流测试"""

import asyncio

from taskpilot.core.models import Notification, NotificationLevel
from taskpilot.gateway.routes.stream import notification_events
from taskpilot.gateway.services.notification_hub import NotificationHub


def _note(message: str = "Created task: Ship release") -> Notification:
    return Notification(level=NotificationLevel.SUCCESS, message=message, source="createTask")


class TestNotificationHub:
    async def test_broadcast_reaches_every_subscriber(self):
        hub = NotificationHub()
        first = await hub.subscribe()
        second = await hub.subscribe()

        delivered = await hub.broadcast(_note())

        assert delivered == 2
        assert first.get_nowait().message == "Created task: Ship release"
        assert second.get_nowait().source == "createTask"

    async def test_unsubscribe(self):
        hub = NotificationHub()
        queue = await hub.subscribe()
        await hub.unsubscribe(queue)

        assert await hub.broadcast(_note()) == 0
        assert hub.subscriber_count == 0

    async def test_full_queue_dropped(self):
        hub = NotificationHub(queue_maxsize=1)
        slow = await hub.subscribe()
        await hub.broadcast(_note("one"))
        await hub.broadcast(_note("two"))

        assert hub.subscriber_count == 0
        assert slow.get_nowait().message == "one"

    async def test_notify_without_subscribers(self):
        """没有前端连接时 notify 只写日志"""
        hub = NotificationHub()
        await hub.notify(_note())


class TestNotificationEvents:
    """SSE 事件生成器"""

    async def test_yields_notification_event(self):
        hub = NotificationHub()
        events = notification_events(hub, heartbeat_interval=5)

        pending = asyncio.ensure_future(anext(events))
        while hub.subscriber_count == 0:
            await asyncio.sleep(0)
        await hub.notify(_note())
        event = await asyncio.wait_for(pending, timeout=1)

        assert event["event"] == "notification"
        parsed = Notification.model_validate_json(event["data"])
        assert parsed.level == NotificationLevel.SUCCESS
        assert parsed.message == "Created task: Ship release"
        await events.aclose()

    async def test_heartbeat_when_idle(self):
        hub = NotificationHub()
        events = notification_events(hub, heartbeat_interval=0.01)

        event = await asyncio.wait_for(anext(events), timeout=1)

        assert event == {"comment": "heartbeat"}
        await events.aclose()

    async def test_close_unsubscribes(self):
        hub = NotificationHub()
        events = notification_events(hub, heartbeat_interval=0.01)
        await anext(events)
        assert hub.subscriber_count == 1

        await events.aclose()
        assert hub.subscriber_count == 0

    async def test_stream_route_registered(self, app):
        assert "/api/stream/notifications" in {route.path for route in app.routes}
