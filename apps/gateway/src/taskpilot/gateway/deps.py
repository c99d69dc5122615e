"""依赖注入模块 -- 通过 FastAPI Depends 注入服务实例

实例挂在 app.state 上，在 lifespan 中初始化/清理。
"""

from fastapi import Request
from taskpilot.core.store import StoreGroup
from taskpilot.core.tools import ToolRegistry

from .services.chat_service import ChatService
from .services.notification_hub import NotificationHub
from .services.task_service import TaskService


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_task_service(request: Request) -> TaskService:
    return request.app.state.task_service


def get_tool_registry(request: Request) -> ToolRegistry:
    return request.app.state.tool_registry


def get_notification_hub(request: Request) -> NotificationHub:
    return request.app.state.notification_hub


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service
