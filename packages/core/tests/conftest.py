"""packages/core 测试配置 -- 核心层 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from taskpilot.core.models import Notification
from taskpilot.core.store import InMemoryTaskStore, SqliteTaskStore, open_sqlite_connection


class RecordingNotifier:
    """记录所有通知，供断言使用"""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    async def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def last(self) -> Notification:
        return self.notifications[-1]


@pytest_asyncio.fixture
async def sqlite_store(tmp_path: Path) -> AsyncGenerator[SqliteTaskStore, None]:
    """空的 SQLite 后端"""
    conn = await open_sqlite_connection(str(tmp_path / "core_test.db"))
    store = SqliteTaskStore(conn)
    yield store
    await store.close()


@pytest_asyncio.fixture
async def memory_store() -> AsyncGenerator[InMemoryTaskStore, None]:
    """空的内存后端（不预置演示任务）"""
    store = InMemoryTaskStore(seed=False)
    yield store
    await store.close()


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def task_store(request, tmp_path: Path):
    """两种后端各跑一遍"""
    if request.param == "memory":
        store = InMemoryTaskStore(seed=False)
    else:
        conn = await open_sqlite_connection(str(tmp_path / "param_test.db"))
        store = SqliteTaskStore(conn)
    yield store
    await store.close()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
