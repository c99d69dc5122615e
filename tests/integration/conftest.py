"""集成测试共享 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskpilot.core.store import create_store_group
from taskpilot.provider import EchoMessageAdapter, FallbackManager, ModelCallResult


@pytest.fixture(autouse=True)
def integration_env(monkeypatch):
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")


@pytest.fixture
def model():
    """Mock 模型客户端，测试中通过 side_effect 编排每轮回复"""
    client = AsyncMock()
    client.complete = AsyncMock(
        return_value=ModelCallResult(content="ok", model_alias="main", duration_ms=1)
    )
    return client


@pytest_asyncio.fixture
async def integration_app(tmp_path: Path, model):
    """集成测试用 FastAPI app（SQLite 存储 + Mock 模型 + echo 降级）"""
    from taskpilot.gateway.main import create_app, init_app_state

    app = create_app()
    store_group = await create_store_group("sqlite", str(tmp_path / "integration.db"))
    init_app_state(
        app,
        store_group,
        FallbackManager(primary=model, fallback=EchoMessageAdapter()),
    )

    yield app

    await store_group.close()


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac
