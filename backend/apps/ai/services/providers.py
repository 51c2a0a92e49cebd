"""Chat-completion dispatch over the supported AI providers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

import httpx
from django.conf import settings
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MODELS: dict[str, str] = {
    "lovable": "google/gemini-3-flash-preview",
    "openai": "gpt-4o-mini",
    "openrouter": "anthropic/claude-3.5-sonnet",
    "local": "llama3",
}

ENDPOINTS: dict[str, str] = {
    "lovable": "https://ai.gateway.lovable.dev/v1/chat/completions",
    "openai": "https://api.openai.com/v1/chat/completions",
    "openrouter": "https://openrouter.ai/api/v1/chat/completions",
}

# Server-side key used when the caller supplies none. "local" has no fallback.
_FALLBACK_KEY_SETTINGS: dict[str, str] = {
    "lovable": "LOVABLE_API_KEY",
    "openai": "OPENAI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}

_CHAT_COMPLETIONS_PATH = "/v1/chat/completions"
_OPENROUTER_REFERER = "https://lovable.dev"
_OPENROUTER_TITLE = "Account Planning App"
DEFAULT_TIMEOUT_SECONDS = 60.0


class AIError(Exception):
    """Base class for provider failures, carrying the HTTP status when known."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class RateLimitedError(AIError):
    def __init__(self) -> None:
        super().__init__("Rate limit exceeded. Please try again later.", 429)


class PaymentRequiredError(AIError):
    def __init__(self) -> None:
        super().__init__("Payment required. Please add funds to your account.", 402)


class InvalidCredentialsError(AIError):
    def __init__(self) -> None:
        super().__init__("Invalid API key. Please check your credentials.", 401)


class TransportError(AIError):
    def __init__(self, status: int | None, body: str = "") -> None:
        if status is None:
            message = f"AI provider unreachable: {body}"
        else:
            message = f"AI provider error: {status} - {body}"
        super().__init__(message, status)
        self.body = body


class ConfigurationError(AIError):
    def __init__(self, message: str) -> None:
        super().__init__(message, None)


@dataclass(frozen=True)
class ProviderConfig:
    """How to reach one AI backend. Built per request, never persisted as-is."""

    provider: str
    model: str | None = None
    api_key: str | None = None
    base_url: str | None = None


@dataclass(frozen=True)
class ResolvedProvider:
    provider: str
    endpoint: str
    model: str
    api_key: str


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class AIRequest(BaseModel):
    messages: list[ChatMessage]
    tools: list[dict[str, Any]] | None = None
    tool_choice: Any = None
    stream: bool | None = None
    max_tokens: int | None = None


class ToolCallFunction(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    arguments: str = ""


class ToolCall(BaseModel):
    model_config = ConfigDict(extra="allow")

    function: ToolCallFunction


class ResponseMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    content: str | None = None
    tool_calls: list[ToolCall] | None = None


class Choice(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: ResponseMessage


class TokenUsage(BaseModel):
    model_config = ConfigDict(extra="allow")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class AIResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    choices: list[Choice] = Field(default_factory=list)
    usage: TokenUsage | None = None

    def first_content(self) -> str:
        if not self.choices:
            return ""
        return self.choices[0].message.content or ""


@dataclass
class ConnectionTestResult:
    success: bool
    message: str
    model: str | None = None


def resolve(config: ProviderConfig) -> ResolvedProvider:
    """Derive the endpoint, model and key for ``config`` from the static tables."""

    provider = config.provider
    if provider not in DEFAULT_MODELS:
        raise ConfigurationError(f"Unknown AI provider: {provider!r}")

    if provider == "local":
        if not config.base_url:
            raise ConfigurationError("Local provider requires a base URL")
        endpoint = _local_endpoint(config.base_url)
    else:
        endpoint = ENDPOINTS[provider]

    return ResolvedProvider(
        provider=provider,
        endpoint=endpoint,
        model=config.model or DEFAULT_MODELS[provider],
        api_key=_resolve_api_key(config),
    )


def call_ai(
    config: ProviderConfig,
    request: AIRequest,
    *,
    transport: httpx.BaseTransport | None = None,
    timeout: float | None = None,
) -> AIResponse:
    """Send one chat-completion request and normalise provider failures.

    Configuration problems surface before any network traffic. There is no
    retry: callers that want resilience wrap this themselves.
    """

    resolved = resolve(config)
    headers = build_headers(resolved)
    body = build_body(resolved, request)

    logger.info(
        "Calling AI provider: %s, model: %s, endpoint: %s",
        resolved.provider,
        resolved.model,
        resolved.endpoint,
    )

    if timeout is None:
        timeout = float(getattr(settings, "AI_REQUEST_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))

    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            response = client.post(resolved.endpoint, headers=headers, json=body)
    except httpx.HTTPError as exc:
        logger.error("AI provider request failed (%s): %s", resolved.provider, exc)
        raise TransportError(None, str(exc)) from exc

    if response.is_error:
        error_text = response.text
        logger.error(
            "AI provider error (%s): %s %s", resolved.provider, response.status_code, error_text
        )
        raise _error_for_status(response.status_code, error_text)

    try:
        return AIResponse.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        raise TransportError(response.status_code, "Malformed provider response") from exc


def build_headers(resolved: ResolvedProvider) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if resolved.api_key:
        headers["Authorization"] = f"Bearer {resolved.api_key}"
    if resolved.provider == "openrouter":
        headers["HTTP-Referer"] = _OPENROUTER_REFERER
        headers["X-Title"] = _OPENROUTER_TITLE
    return headers


def build_body(resolved: ResolvedProvider, request: AIRequest) -> dict[str, Any]:
    body: dict[str, Any] = {
        "model": resolved.model,
        "messages": [message.model_dump() for message in request.messages],
    }
    if request.tools:
        body["tools"] = request.tools
    if request.tool_choice:
        body["tool_choice"] = request.tool_choice
    if request.stream is not None:
        body["stream"] = request.stream
    if request.max_tokens:
        body[_max_tokens_field(resolved)] = request.max_tokens
    return body


def check_connection(
    config: ProviderConfig,
    *,
    prompt: str | None = None,
    transport: httpx.BaseTransport | None = None,
) -> ConnectionTestResult:
    """Send a tiny prompt to the provider and report whether it answered."""

    request = AIRequest(
        messages=[ChatMessage(role="user", content=prompt or 'Say "OK" if you can hear me.')],
        max_tokens=10,
    )
    try:
        response = call_ai(config, request, transport=transport)
    except AIError as exc:
        return ConnectionTestResult(success=False, message=exc.message)

    content = response.first_content()
    return ConnectionTestResult(
        success=True,
        message=f"Connection successful: {content[:50]}",
        model=config.model or DEFAULT_MODELS.get(config.provider),
    )


def user_message(content: str) -> list[ChatMessage]:
    return [ChatMessage(role="user", content=content)]


def _resolve_api_key(config: ProviderConfig) -> str:
    if config.provider == "lovable":
        return getattr(settings, "LOVABLE_API_KEY", None) or ""
    if config.api_key:
        return config.api_key
    setting_name = _FALLBACK_KEY_SETTINGS.get(config.provider)
    if not setting_name:
        return ""
    return getattr(settings, setting_name, None) or ""


def _local_endpoint(base_url: str) -> str:
    if base_url.endswith(_CHAT_COMPLETIONS_PATH):
        return base_url
    return f"{base_url.rstrip('/')}{_CHAT_COMPLETIONS_PATH}"


def _max_tokens_field(resolved: ResolvedProvider) -> str:
    if resolved.provider == "openai" and "gpt-4" in resolved.model:
        return "max_completion_tokens"
    return "max_tokens"


def _error_for_status(status: int, body: str) -> AIError:
    if status == 429:
        return RateLimitedError()
    if status == 402:
        return PaymentRequiredError()
    if status == 401:
        return InvalidCredentialsError()
    return TransportError(status, body)


__all__ = [
    "AIError",
    "AIRequest",
    "AIResponse",
    "ChatMessage",
    "ConfigurationError",
    "ConnectionTestResult",
    "DEFAULT_MODELS",
    "ENDPOINTS",
    "InvalidCredentialsError",
    "PaymentRequiredError",
    "ProviderConfig",
    "RateLimitedError",
    "ResolvedProvider",
    "TokenUsage",
    "TransportError",
    "build_body",
    "build_headers",
    "call_ai",
    "resolve",
    "check_connection",
    "user_message",
]
