"""Provider 异常体系

ProviderError 是聊天模型调用失败的统一类型，gateway 将其映射为 502 PROVIDER_ERROR。
异常消息只进日志，不会原样返回给用户。
"""


class ProviderError(Exception):
    """聊天模型调用失败"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述（仅用于日志）
            recoverable: 换一个模型或稍后重试能否恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class ProxyUnreachableError(ProviderError):
    """连不上 LiteLLM Proxy（连接被拒、超时、DNS 失败）"""

    def __init__(self, proxy_url: str, original_error: Exception) -> None:
        super().__init__(
            f"LiteLLM Proxy unreachable at {proxy_url}: "
            f"{type(original_error).__name__}: {original_error}",
            recoverable=True,
        )
        self.proxy_url = proxy_url
        self.original_error = original_error


class AssistantUnavailableError(ProviderError):
    """降级链上没有任何模型能回答本轮对话

    primary_error / fallback_error 保留两端的原始异常，供日志排查。
    """

    def __init__(
        self,
        model_alias: str,
        primary_error: Exception,
        fallback_error: Exception | None = None,
    ) -> None:
        detail = f"primary {type(primary_error).__name__}: {primary_error}"
        if fallback_error is None:
            detail += "; no fallback configured"
        else:
            detail += f"; fallback {type(fallback_error).__name__}: {fallback_error}"
        super().__init__(f"No model answered for {model_alias!r} ({detail})", recoverable=False)
        self.model_alias = model_alias
        self.primary_error = primary_error
        self.fallback_error = fallback_error
