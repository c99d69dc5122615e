"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含任务存储连通性、磁盘空间。
         profile=llm/full 时额外探测 LiteLLM Proxy。
"""

import shutil

import structlog
from fastapi import APIRouter, Query, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


async def _check_store(request: Request) -> str:
    """SQLite 后端执行 SELECT 1；内存后端无需探测"""
    store_group = request.app.state.store_group
    if store_group.conn is None:
        return store_group.backend
    cursor = await store_group.conn.execute("SELECT 1")
    await cursor.fetchone()
    return "ok"


@router.get("/ready")
async def ready(
    request: Request,
    profile: str | None = Query(
        default=None,
        description="core（默认）仅核心检查；llm/full 包含 LiteLLM Proxy 健康检查",
    ),
):
    """Readiness 检查

    检查项：
    1. task_store: 存储连通性（内存后端报告 "memory"）
    2. disk_space_mb: 磁盘剩余空间
    3. litellm_proxy: 根据 profile 决定是否探测 Proxy
    """
    effective_profile = profile or "core"

    checks: dict[str, str | int] = {}
    all_ok = True

    try:
        checks["task_store"] = await _check_store(request)
    except Exception as e:
        log.warning("ready_store_check_failed", error=str(e))
        checks["task_store"] = f"error: {e}"
        all_ok = False

    try:
        disk_usage = shutil.disk_usage("/")
        checks["disk_space_mb"] = disk_usage.free // (1024 * 1024)
    except OSError:
        checks["disk_space_mb"] = 0
        all_ok = False

    if effective_profile in ("llm", "full"):
        litellm_client = getattr(request.app.state, "litellm_client", None)
        if litellm_client is None:
            # Echo 模式：没有可探测的 Proxy
            checks["litellm_proxy"] = "skipped"
        elif await litellm_client.health_check():
            checks["litellm_proxy"] = "ok"
        else:
            checks["litellm_proxy"] = "unreachable"
            all_ok = False
    else:
        checks["litellm_proxy"] = "skipped"

    status_code = 200 if all_ok else 503
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "ready" if all_ok else "not_ready",
            "profile": effective_profile,
            "checks": checks,
        },
    )
