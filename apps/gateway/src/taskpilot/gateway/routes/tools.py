"""工具路由 -- 让聊天运行时之外的调用方直接使用 Tool Registry

GET  /api/tools          工具 function schema 列表
POST /api/tools/{name}   调用工具，返回给 agent 的结果字符串
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from taskpilot.core.tools import ToolRegistry

from ..deps import get_tool_registry
from ..errors import error_response

router = APIRouter()


class ToolInvocation(BaseModel):
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolInvocationResult(BaseModel):
    tool: str
    result: str


@router.get("/api/tools")
async def list_tools(registry: ToolRegistry = Depends(get_tool_registry)):
    return {"tools": registry.function_schemas()}


@router.post("/api/tools/{name}", response_model=ToolInvocationResult)
async def invoke_tool(
    name: str,
    body: ToolInvocation | None = None,
    registry: ToolRegistry = Depends(get_tool_registry),
):
    """未知工具返回 404；其余结果（含失败说明）总是 200"""
    if registry.get(name) is None:
        return error_response(404, "TOOL_NOT_FOUND", f"Unknown tool: {name}")
    arguments = body.arguments if body else {}
    return ToolInvocationResult(tool=name, result=await registry.invoke(name, arguments))
