"""错误响应 -- 统一 {"error": {"code", "message", "field"?}} 结构

Core 异常在 REST 边界转换为 JSON；后端原始错误只写日志，不进入响应体。
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse
from taskpilot.core.exceptions import (
    AmbiguousTaskError,
    BackendError,
    TaskNotFoundError,
    TaskValidationError,
)
from taskpilot.provider import ProviderError

log = structlog.get_logger()


def error_response(
    status_code: int,
    code: str,
    message: str,
    field: str | None = None,
) -> JSONResponse:
    error: dict[str, str] = {"code": code, "message": message}
    if field is not None:
        error["field"] = field
    return JSONResponse(status_code=status_code, content={"error": error})


async def _not_found(request: Request, exc: TaskNotFoundError) -> JSONResponse:
    return error_response(404, "TASK_NOT_FOUND", f"Task with id {exc.identifier} does not exist")


async def _ambiguous(request: Request, exc: AmbiguousTaskError) -> JSONResponse:
    return error_response(409, "AMBIGUOUS_TASK", exc.message)


async def _invalid(request: Request, exc: TaskValidationError) -> JSONResponse:
    return error_response(422, "VALIDATION_ERROR", exc.message, exc.field)


async def _request_invalid(request: Request, exc: RequestValidationError) -> JSONResponse:
    """FastAPI 请求体校验失败，只报告第一个错误"""
    errors = exc.errors()
    if not errors:
        return error_response(422, "VALIDATION_ERROR", "Invalid request")
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    return error_response(
        422,
        "VALIDATION_ERROR",
        first.get("msg", "Invalid request"),
        loc[-1] if loc else None,
    )


async def _backend_failed(request: Request, exc: BackendError) -> JSONResponse:
    await log.aerror(
        "backend_error",
        operation=exc.operation,
        cause=repr(exc.__cause__),
    )
    return error_response(503, "BACKEND_ERROR", "The task store is unavailable. Please try again.")


async def _provider_failed(request: Request, exc: ProviderError) -> JSONResponse:
    await log.aerror("provider_error", error=str(exc))
    return error_response(502, "PROVIDER_ERROR", "The assistant is unavailable. Please try again.")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskNotFoundError, _not_found)
    app.add_exception_handler(AmbiguousTaskError, _ambiguous)
    app.add_exception_handler(TaskValidationError, _invalid)
    app.add_exception_handler(RequestValidationError, _request_invalid)
    app.add_exception_handler(BackendError, _backend_failed)
    app.add_exception_handler(ProviderError, _provider_failed)
