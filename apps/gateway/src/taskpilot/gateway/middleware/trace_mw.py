"""TraceMiddleware -- 为单任务请求绑定 task_id

/api/tasks/{task_id} 及其子路由的日志都带上 task_id。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# 集合路由，不是任务 id
_COLLECTION_SEGMENTS = frozenset({"board", "seed"})


def extract_task_id(path: str) -> str | None:
    """从 /api/tasks/{task_id}[/...] 中取出 task_id"""
    parts = [part for part in path.split("/") if part]
    if len(parts) < 3 or parts[:2] != ["api", "tasks"]:
        return None
    candidate = parts[2]
    if candidate in _COLLECTION_SEGMENTS:
        return None
    return candidate


class TraceMiddleware(BaseHTTPMiddleware):
    """任务级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        task_id = extract_task_id(request.url.path)
        if task_id:
            structlog.contextvars.bind_contextvars(task_id=task_id)

        return await call_next(request)
