"""Service helpers for AI provider access."""

from .providers import (
    DEFAULT_MODELS,
    ENDPOINTS,
    AIError,
    AIRequest,
    AIResponse,
    ChatMessage,
    ConfigurationError,
    ConnectionTestResult,
    InvalidCredentialsError,
    PaymentRequiredError,
    ProviderConfig,
    RateLimitedError,
    ResolvedProvider,
    TokenUsage,
    TransportError,
    call_ai,
    check_connection,
    resolve,
    user_message,
)
from .user_settings import (
    default_provider_config,
    provider_config_for_user,
    update_user_settings,
)

__all__ = [
    "DEFAULT_MODELS",
    "ENDPOINTS",
    "AIError",
    "AIRequest",
    "AIResponse",
    "ChatMessage",
    "ConfigurationError",
    "ConnectionTestResult",
    "InvalidCredentialsError",
    "PaymentRequiredError",
    "ProviderConfig",
    "RateLimitedError",
    "ResolvedProvider",
    "TokenUsage",
    "TransportError",
    "call_ai",
    "check_connection",
    "resolve",
    "user_message",
    "default_provider_config",
    "provider_config_for_user",
    "update_user_settings",
]
