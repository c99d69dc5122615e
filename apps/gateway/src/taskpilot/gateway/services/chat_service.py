"""ChatService -- 聊天轮次 + 工具循环

一轮对话：
1. 基于当前任务快照构建系统提示词
2. 携带工具 schema 调用模型
3. 模型请求工具时逐个经 ToolRegistry.invoke 执行，结果作为 tool 消息回填
4. 重复直到模型给出纯文本回复，或达到 max_tool_rounds
"""

from typing import Any, Literal

import structlog
from pydantic import BaseModel, Field
from taskpilot.core.context import build_readable_context
from taskpilot.core.store import TaskStore
from taskpilot.core.tools import ToolRegistry, build_system_prompt
from taskpilot.provider import FallbackManager, ModelCallResult

log = structlog.get_logger()


class ChatMessage(BaseModel):
    """客户端传入的对话消息"""

    role: Literal["user", "assistant"]
    content: str


class ToolResult(BaseModel):
    """一次工具调用及其结果"""

    tool: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    result: str


class ChatReply(BaseModel):
    """一轮对话的最终回复"""

    content: str
    tool_results: list[ToolResult] = Field(default_factory=list)
    is_fallback: bool = False
    tools_withheld: bool = Field(
        default=False,
        description="回复来自降级模型，本轮没有执行任何看板操作",
    )


class ChatService:
    """聊天运行时适配层"""

    def __init__(
        self,
        fallback_manager: FallbackManager,
        registry: ToolRegistry,
        store: TaskStore,
        model_alias: str = "main",
        max_tool_rounds: int = 5,
    ) -> None:
        self._fallback_manager = fallback_manager
        self._registry = registry
        self._store = store
        self._model_alias = model_alias
        self._max_tool_rounds = max_tool_rounds

    async def _system_message(self) -> dict[str, Any]:
        context = build_readable_context(await self._store.list_tasks())
        return {"role": "system", "content": build_system_prompt(context)}

    async def _call_model(self, messages: list[dict[str, Any]], **kwargs) -> ModelCallResult:
        result = await self._fallback_manager.call_with_fallback(
            messages,
            model_alias=self._model_alias,
            **kwargs,
        )
        await log.ainfo(
            "chat_model_called",
            model_alias=result.model_alias,
            model_name=result.model_name,
            duration_ms=result.duration_ms,
            tool_calls=len(result.tool_calls),
            is_fallback=result.is_fallback,
            tools_withheld=result.tools_withheld,
        )
        return result

    async def reply(self, history: list[ChatMessage]) -> ChatReply:
        """执行一轮对话

        Raises:
            ProviderError: 模型调用失败且降级也失败
        """
        messages: list[dict[str, Any]] = [
            await self._system_message(),
            *(message.model_dump() for message in history),
        ]
        tools = self._registry.function_schemas()
        tool_results: list[ToolResult] = []
        is_fallback = False

        for _ in range(self._max_tool_rounds):
            result = await self._call_model(messages, tools=tools)
            is_fallback = is_fallback or result.is_fallback
            if not result.tool_calls:
                return ChatReply(
                    content=result.content,
                    tool_results=tool_results,
                    is_fallback=is_fallback,
                    tools_withheld=result.tools_withheld,
                )

            messages.append(result.assistant_message())
            for call in result.tool_calls:
                # 每次调用重新读取任务，后一个工具能看到前一个工具的修改
                output = await self._registry.invoke(call.name, call.arguments)
                tool_results.append(
                    ToolResult(tool=call.name, arguments=call.arguments, result=output)
                )
                messages.append(
                    {"role": "tool", "tool_call_id": call.id, "content": output}
                )

        await log.awarning(
            "chat_tool_rounds_exhausted",
            max_tool_rounds=self._max_tool_rounds,
            tool_calls=len(tool_results),
        )
        # 不再提供工具，让模型基于已有结果收尾
        result = await self._call_model(messages)
        return ChatReply(
            content=result.content,
            tool_results=tool_results,
            is_fallback=is_fallback or result.is_fallback,
        )
