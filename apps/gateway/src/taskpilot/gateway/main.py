"""FastAPI 应用主文件

app 创建 + lifespan 管理：任务存储初始化/关闭、通知广播器、工具注册表、
LLM 组件初始化、路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from taskpilot.core.store import StoreGroup, create_store_group
from taskpilot.core.tools import build_task_registry
from taskpilot.provider import (
    EchoMessageAdapter,
    FallbackManager,
    LiteLLMClient,
    ProviderConfig,
    load_provider_config,
)

from .errors import register_exception_handlers
from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import chat, copilot, health, stream, tasks, tools
from .services.chat_service import ChatService
from .services.notification_hub import NotificationHub
from .services.task_service import TaskService

log = structlog.get_logger()


def build_fallback_manager(
    config: ProviderConfig,
) -> tuple[FallbackManager, LiteLLMClient | None]:
    """按 llm_mode 组装降级链

    Returns:
        (FallbackManager, litellm_client)；echo 模式下 litellm_client 为 None
    """
    if config.llm_mode == "litellm":
        litellm_client = LiteLLMClient(
            proxy_base_url=config.proxy_base_url,
            proxy_api_key=config.proxy_api_key.get_secret_value(),
            timeout_s=config.timeout_s,
        )
        return (
            FallbackManager(primary=litellm_client, fallback=EchoMessageAdapter()),
            litellm_client,
        )
    return FallbackManager(primary=EchoMessageAdapter(), fallback=None), None


def init_app_state(
    app: FastAPI,
    store_group: StoreGroup,
    fallback_manager: FallbackManager,
    litellm_client: LiteLLMClient | None = None,
    model_alias: str = "main",
    max_tool_rounds: int = 5,
) -> None:
    """把存储、通知广播器、工具注册表和各服务挂到 app.state

    UI 路由与工具共用同一个 task_store 和同一个 NotificationHub。
    """
    app.state.store_group = store_group

    hub = NotificationHub()
    app.state.notification_hub = hub

    registry = build_task_registry(store_group.task_store, hub)
    app.state.tool_registry = registry
    app.state.task_service = TaskService(store_group.task_store, hub)

    # 健康检查使用
    app.state.litellm_client = litellm_client
    app.state.chat_service = ChatService(
        fallback_manager=fallback_manager,
        registry=registry,
        store=store_group.task_store,
        model_alias=model_alias,
        max_tool_rounds=max_tool_rounds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """启动时初始化存储和服务，关闭时释放存储"""
    store_group = await create_store_group()

    provider_config = load_provider_config()
    app.state.provider_config = provider_config
    fallback_manager, litellm_client = build_fallback_manager(provider_config)

    init_app_state(
        app,
        store_group,
        fallback_manager,
        litellm_client=litellm_client,
        model_alias=provider_config.model_alias,
        max_tool_rounds=provider_config.max_tool_rounds,
    )
    log.info(
        "gateway_started",
        store_backend=store_group.backend,
        llm_mode=provider_config.llm_mode,
        tools=[spec.name for spec in app.state.tool_registry.specs()],
    )

    yield

    await store_group.close()
    log.info("gateway_stopped")


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="TaskPilot Gateway",
        version="0.1.0",
        description="TaskPilot 看板 + 聊天助手 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging，Logging 在最外层）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_logging()
    setup_logfire(app)

    register_exception_handlers(app)

    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(tools.router, tags=["tools"])
    app.include_router(copilot.router, tags=["copilot"])
    app.include_router(chat.router, tags=["chat"])
    app.include_router(stream.router, tags=["stream"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
