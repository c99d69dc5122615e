"""数据模型 -- TokenUsage + ToolCall + ModelCallResult"""

import json
from typing import Any

from pydantic import BaseModel, Field


class TokenUsage(BaseModel):
    """Token 使用统计

    key 命名对齐 OpenAI/LiteLLM 行业标准：
    prompt_tokens / completion_tokens / total_tokens
    """

    prompt_tokens: int = Field(default=0, ge=0, description="输入 token 数")
    completion_tokens: int = Field(default=0, ge=0, description="输出 token 数")
    total_tokens: int = Field(default=0, ge=0, description="总 token 数")


class ToolCall(BaseModel):
    """模型请求的一次工具调用"""

    id: str = Field(description="调用 ID，工具结果消息需回传")
    name: str = Field(description="工具名")
    arguments: dict[str, Any] = Field(default_factory=dict, description="解析后的参数")
    raw_arguments: str = Field(default="", description="模型输出的原始参数 JSON")

    def to_message_part(self) -> dict[str, Any]:
        """还原为 assistant 消息中的 tool_calls 条目"""
        return {
            "id": self.id,
            "type": "function",
            "function": {
                "name": self.name,
                "arguments": self.raw_arguments or json.dumps(self.arguments),
            },
        }


class ModelCallResult(BaseModel):
    """LLM 调用结果

    所有 provider（LiteLLM、Echo、Mock）统一返回此类型。
    """

    # 响应内容
    content: str = Field(description="LLM 响应文本内容")
    tool_calls: list[ToolCall] = Field(default_factory=list, description="请求的工具调用")

    # 路由信息
    model_alias: str = Field(description="请求时使用的模型组名")
    model_name: str = Field(default="", description="实际调用的模型名称（如 gpt-4o-mini）")
    provider: str = Field(default="", description="实际 provider（如 openai/anthropic）")

    # 性能指标
    duration_ms: int = Field(ge=0, description="端到端耗时（毫秒）")

    # Token 使用
    token_usage: TokenUsage = Field(
        default_factory=TokenUsage,
        description="Token 使用详情",
    )

    # 降级信息
    is_fallback: bool = Field(default=False, description="是否为降级调用")
    fallback_reason: str = Field(default="", description="降级原因说明")
    tools_withheld: bool = Field(
        default=False,
        description="降级时本轮提供的工具未交给应答模型（不会执行任何工具）",
    )

    def assistant_message(self) -> dict[str, Any]:
        """生成回填到对话历史中的 assistant 消息"""
        message: dict[str, Any] = {"role": "assistant", "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [call.to_message_part() for call in self.tool_calls]
        return message
