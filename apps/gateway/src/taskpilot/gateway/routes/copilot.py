"""助手上下文路由

GET /api/copilot/context      agent 可读的任务快照 + 统计
GET /api/copilot/suggestions  聊天面板的快捷建议
"""

from fastapi import APIRouter, Depends
from taskpilot.core.context import TaskContext, build_readable_context
from taskpilot.core.tools import CHAT_SUGGESTIONS

from ..deps import get_task_service
from ..services.task_service import TaskService

router = APIRouter()


@router.get("/api/copilot/context", response_model=TaskContext)
async def get_context(service: TaskService = Depends(get_task_service)):
    return build_readable_context(await service.list_tasks())


@router.get("/api/copilot/suggestions")
async def get_suggestions():
    return {"suggestions": CHAT_SUGGESTIONS}
