"""Provider 包测试 fixtures"""

from unittest.mock import MagicMock

import pytest


@pytest.fixture
def sample_messages() -> list[dict[str, str]]:
    """标准 messages 格式测试数据"""
    return [{"role": "user", "content": "Mark the release task as done"}]


@pytest.fixture
def make_litellm_response():
    """构造 Mock LiteLLM acompletion 返回的工厂"""

    def _make(
        content: str | None = "Hello!",
        tool_calls: list[tuple[str, str, str]] | None = None,
        model: str = "gpt-4o-mini",
        prompt_tokens: int = 10,
        completion_tokens: int = 20,
    ):
        response = MagicMock()
        response.model = model

        choice = MagicMock()
        choice.message.content = content
        raw_calls = []
        for call_id, name, arguments in tool_calls or []:
            raw = MagicMock()
            raw.id = call_id
            raw.function.name = name
            raw.function.arguments = arguments
            raw_calls.append(raw)
        choice.message.tool_calls = raw_calls or None
        response.choices = [choice]

        usage = MagicMock()
        usage.prompt_tokens = prompt_tokens
        usage.completion_tokens = completion_tokens
        usage.total_tokens = prompt_tokens + completion_tokens
        response.usage = usage

        response._hidden_params = {"custom_llm_provider": "openai"}
        return response

    return _make
