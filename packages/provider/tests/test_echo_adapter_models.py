"""EchoMessageAdapter 与数据模型单元测试"""

import pytest
from taskpilot.provider.echo_adapter import EchoMessageAdapter
from taskpilot.provider.models import ModelCallResult, ToolCall


@pytest.fixture
def adapter():
    return EchoMessageAdapter()


class TestEchoMessageAdapter:
    async def test_echoes_last_user_message(self, adapter):
        messages = [
            {"role": "system", "content": "You are helpful"},
            {"role": "user", "content": "First question"},
            {"role": "assistant", "content": "First answer"},
            {"role": "user", "content": "Second question"},
        ]
        result = await adapter.complete(messages)

        assert isinstance(result, ModelCallResult)
        assert result.content == "Echo: Second question"
        assert result.provider == "echo"
        assert result.model_alias == "echo"

    async def test_never_requests_tools(self, adapter):
        tools = [{"type": "function", "function": {"name": "findTask"}}]
        result = await adapter.complete([{"role": "user", "content": "hi"}], tools=tools)
        assert result.tool_calls == []

    async def test_no_user_message(self, adapter):
        result = await adapter.complete([{"role": "system", "content": "sys"}])
        assert result.content == "Echo: (empty)"

    async def test_token_usage_populated(self, adapter):
        result = await adapter.complete([{"role": "user", "content": "hello world"}])
        assert result.token_usage.prompt_tokens == 2
        assert result.token_usage.total_tokens == (
            result.token_usage.prompt_tokens + result.token_usage.completion_tokens
        )


class TestAssistantMessage:
    def test_plain_reply(self):
        result = ModelCallResult(content="Done", model_alias="main", duration_ms=1)
        assert result.assistant_message() == {"role": "assistant", "content": "Done"}

    def test_reply_with_tool_calls(self):
        result = ModelCallResult(
            content="",
            model_alias="main",
            duration_ms=1,
            tool_calls=[ToolCall(id="c1", name="findTask", arguments={"query": "ship"})],
        )
        message = result.assistant_message()
        [part] = message["tool_calls"]
        assert part["id"] == "c1"
        assert part["type"] == "function"
        assert part["function"]["name"] == "findTask"
        assert part["function"]["arguments"] == '{"query": "ship"}'
