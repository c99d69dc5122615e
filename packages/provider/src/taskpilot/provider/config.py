"""ProviderConfig -- Provider 配置加载

从环境变量加载配置，不硬编码 provider/模型名。
"""

import os
from typing import Literal

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()


class ProviderConfig(BaseModel):
    """Provider 包配置 -- 从环境变量加载

    环境变量:
        LITELLM_PROXY_URL: Proxy 地址（默认 http://localhost:4000）
        LITELLM_PROXY_KEY: Proxy 访问密钥
        TASKPILOT_LLM_MODE: LLM 运行模式（litellm/echo）
        TASKPILOT_LLM_MODEL: Proxy 中的模型组名（默认 main）
        TASKPILOT_LLM_TIMEOUT_S: 调用超时（秒，默认 30）
        TASKPILOT_CHAT_MAX_TOOL_ROUNDS: 单轮对话内工具调用的最大轮数（默认 5）
    """

    proxy_base_url: str = Field(
        default="http://localhost:4000",
        description="LiteLLM Proxy 基础 URL",
    )
    proxy_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Proxy 访问密钥（不是 LLM provider API key）",
    )
    llm_mode: Literal["litellm", "echo"] = Field(
        default="echo",
        description="LLM 运行模式：litellm / echo",
    )
    model_alias: str = Field(
        default="main",
        description="Proxy 中配置的模型组名",
    )
    timeout_s: int = Field(
        default=30,
        ge=1,
        description="LLM 调用超时（秒）",
    )
    max_tool_rounds: int = Field(
        default=5,
        ge=1,
        description="单轮对话内模型 -> 工具 -> 模型的最大循环次数",
    )


def _int_from_env(kwargs: dict, field: str, env_var: str, fallback: int) -> None:
    if val := os.environ.get(env_var):
        try:
            kwargs[field] = int(val)
        except ValueError:
            log.warning(
                "invalid_int_config",
                env_var=env_var,
                value=val,
                fallback=fallback,
            )
            # 使用默认值，不阻塞启动


def load_provider_config() -> ProviderConfig:
    """从环境变量加载 Provider 配置

    Returns:
        ProviderConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("LITELLM_PROXY_URL"):
        kwargs["proxy_base_url"] = val

    if val := os.environ.get("LITELLM_PROXY_KEY"):
        kwargs["proxy_api_key"] = SecretStr(val)

    if val := os.environ.get("TASKPILOT_LLM_MODE"):
        if val in ("litellm", "echo"):
            kwargs["llm_mode"] = val
        else:
            log.warning("invalid_llm_mode", env_var="TASKPILOT_LLM_MODE", value=val, fallback="echo")

    if val := os.environ.get("TASKPILOT_LLM_MODEL"):
        kwargs["model_alias"] = val

    _int_from_env(kwargs, "timeout_s", "TASKPILOT_LLM_TIMEOUT_S", 30)
    _int_from_env(kwargs, "max_tool_rounds", "TASKPILOT_CHAT_MAX_TOOL_ROUNDS", 5)

    return ProviderConfig(**kwargs)
