"""FallbackManager -- 聊天模型降级链

每次调用先走 primary（可以请求工具），失败后改由 fallback 作答，不缓存降级状态。

fallback 只能回显文本，无法操作看板：工具 schema 不会传给它，它返回的工具调用也一律丢弃。
降级结果标记 tools_withheld，聊天层据此告诉用户本轮没有执行任何看板操作。
"""

from typing import Any, Protocol

import structlog

from .exceptions import AssistantUnavailableError
from .models import ModelCallResult

log = structlog.get_logger()


class ChatModel(Protocol):
    """LiteLLMClient / EchoMessageAdapter 共同的调用接口"""

    async def complete(
        self,
        messages: list[dict[str, Any]],
        model_alias: str = ...,
        **kwargs: Any,
    ) -> ModelCallResult: ...


class FallbackManager:
    """降级管理器

    litellm 模式: LiteLLMClient -> EchoMessageAdapter
    echo 模式: EchoMessageAdapter，无降级
    """

    def __init__(self, primary: ChatModel, fallback: ChatModel | None = None) -> None:
        self._primary = primary
        self._fallback = fallback

    @property
    def primary(self) -> ChatModel:
        return self._primary

    async def call_with_fallback(
        self,
        messages: list[dict[str, Any]],
        model_alias: str = "main",
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> ModelCallResult:
        """调用聊天模型，primary 失败时降级

        Args:
            messages: 对话消息
            model_alias: 模型组名
            tools: 工具 function schema，只提供给 primary；为空时不传 tools 参数
            **kwargs: 其他 primary 参数（temperature 等）

        Returns:
            ModelCallResult；降级时 is_fallback=True、tool_calls 为空，
            且在本次提供了工具时 tools_withheld=True

        Raises:
            AssistantUnavailableError: primary 失败且没有可用的 fallback
        """
        options = dict(kwargs)
        if tools:
            options["tools"] = tools

        try:
            return await self._primary.complete(
                messages=messages, model_alias=model_alias, **options
            )
        except Exception as exc:
            primary_error = exc

        log.warning(
            "chat_model_primary_failed",
            model_alias=model_alias,
            error_type=type(primary_error).__name__,
            error=str(primary_error),
            tools_offered=len(tools or []),
        )
        if self._fallback is None:
            raise AssistantUnavailableError(model_alias, primary_error) from primary_error

        try:
            result = await self._fallback.complete(messages=messages, model_alias=model_alias)
        except Exception as fallback_error:
            log.error(
                "chat_model_fallback_failed",
                model_alias=model_alias,
                primary_error=str(primary_error),
                fallback_error=str(fallback_error),
            )
            raise AssistantUnavailableError(
                model_alias, primary_error, fallback_error
            ) from fallback_error

        withheld = bool(tools)
        log.info(
            "chat_model_fell_back",
            model_alias=model_alias,
            tools_withheld=withheld,
            dropped_tool_calls=len(result.tool_calls),
        )
        return result.model_copy(
            update={
                "tool_calls": [],
                "is_fallback": True,
                "tools_withheld": withheld,
                "fallback_reason": f"{type(primary_error).__name__}: {primary_error}",
            }
        )
