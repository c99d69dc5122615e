"""apps/gateway 测试配置 -- httpx ASGITransport + 临时 SQLite 存储

ASGITransport 不触发 lifespan，app fixture 手动调用 init_app_state 完成初始化。
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskpilot.core.store import StoreGroup, create_store_group
from taskpilot.provider import EchoMessageAdapter, FallbackManager


@pytest.fixture(autouse=True)
def gateway_env(tmp_path: Path, monkeypatch):
    """测试环境变量"""
    monkeypatch.setenv("TASKPILOT_DB_PATH", str(tmp_path / "sqlite" / "gateway.db"))
    monkeypatch.setenv("TASKPILOT_STORE_BACKEND", "sqlite")
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")


@pytest_asyncio.fixture
async def store_group(tmp_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """空的 SQLite 存储组"""
    group = await create_store_group("sqlite", str(tmp_path / "sqlite" / "gateway.db"))
    yield group
    await group.close()


@pytest.fixture
def fallback_manager() -> FallbackManager:
    """默认 echo 降级链；聊天测试中按需覆盖"""
    return FallbackManager(primary=EchoMessageAdapter(), fallback=None)


@pytest_asyncio.fixture
async def app(store_group: StoreGroup, fallback_manager: FallbackManager):
    """创建测试用 FastAPI app 实例（绕过 lifespan）"""
    from taskpilot.gateway.main import create_app, init_app_state

    application = create_app()
    init_app_state(application, store_group, fallback_manager)
    yield application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def hub(app):
    return app.state.notification_hub
