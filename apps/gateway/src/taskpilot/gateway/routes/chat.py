"""聊天路由

POST /api/chat: 执行一轮对话（含工具循环）。模型调用失败时返回 502。
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..deps import get_chat_service
from ..services.chat_service import ChatMessage, ChatReply, ChatService

router = APIRouter()


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(min_length=1, description="对话历史，最后一条通常是用户消息")


@router.post("/api/chat", response_model=ChatReply)
async def chat(body: ChatRequest, service: ChatService = Depends(get_chat_service)):
    return await service.reply(body.messages)
