"""TaskPilot Provider -- LLM 调用抽象层

packages/provider 的公开接口导出。
"""

# 核心组件
from .client import LiteLLMClient

# 配置
from .config import ProviderConfig, load_provider_config
from .echo_adapter import EchoMessageAdapter

# 异常
from .exceptions import AssistantUnavailableError, ProviderError, ProxyUnreachableError
from .fallback import FallbackManager
from .models import ModelCallResult, TokenUsage, ToolCall

__all__ = [
    "ModelCallResult",
    "TokenUsage",
    "ToolCall",
    "LiteLLMClient",
    "FallbackManager",
    "EchoMessageAdapter",
    "ProviderConfig",
    "load_provider_config",
    "ProviderError",
    "AssistantUnavailableError",
    "ProxyUnreachableError",
]
