"""EchoMessageAdapter -- 离线回声模式

未配置 LLM Proxy 时的默认后端，也是 FallbackManager 的降级后备。
从不请求工具调用，因此聊天循环在一轮内结束。
"""

import asyncio
import time
from typing import Any

from .models import ModelCallResult, TokenUsage


class EchoMessageAdapter:
    """将最后一条用户消息原样回显的 provider"""

    async def complete(
        self,
        messages: list[dict[str, Any]],
        model_alias: str = "echo",
        **kwargs,
    ) -> ModelCallResult:
        """通过 Echo 模式处理 messages

        Args:
            messages: 消息列表
            model_alias: 模型别名
            **kwargs: 忽略（包括 tools）

        Returns:
            ModelCallResult，content 为 "Echo: {最后一条用户消息}"
        """
        start_time = time.monotonic()

        user_content = self._extract_last_user_content(messages)

        # 模拟少量延迟
        await asyncio.sleep(0.01)

        response_text = f"Echo: {user_content}"

        # 按 word 简单估算 token
        prompt_tokens = len(user_content.split())
        completion_tokens = len(response_text.split())

        return ModelCallResult(
            content=response_text,
            model_alias=model_alias,
            model_name="echo",
            provider="echo",
            duration_ms=int((time.monotonic() - start_time) * 1000),
            token_usage=TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
        )

    @staticmethod
    def _extract_last_user_content(messages: list[dict[str, Any]]) -> str:
        """提取最后一条 user message 的 content，无 user 消息时返回 "(empty)" """
        for msg in reversed(messages):
            if msg.get("role") == "user":
                return msg.get("content") or ""
        return "(empty)"
