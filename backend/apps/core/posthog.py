"""PostHog configuration helpers."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Optional

from django.conf import settings
from posthog import Posthog

logger = logging.getLogger(__name__)

_client: Optional[Posthog] = None
_configured = False
_lock = Lock()


def configure_posthog(*, force: bool = False) -> Optional[Posthog]:
    """Initialize the shared PostHog client used for exception reporting."""

    global _client, _configured

    with _lock:
        if _configured and not force:
            return _client

        api_key = getattr(settings, "POSTHOG_PROJECT_API_KEY", None)
        if not api_key:
            _client = None
            _configured = True
            return None

        host = getattr(settings, "POSTHOG_HOST", "https://us.i.posthog.com")
        client = Posthog(api_key, host=host)

        if getattr(settings, "POSTHOG_DEBUG", False):
            client.debug = True

        if getattr(settings, "POSTHOG_DISABLED", False):
            client.disabled = True

        _client = client
        _configured = True
        return _client


def get_posthog_client() -> Optional[Posthog]:
    """Return the shared PostHog client if configured."""

    return configure_posthog()


def capture_exception(
    exc: BaseException,
    *,
    distinct_id: Optional[str] = None,
    properties: Optional[dict[str, Any]] = None,
) -> None:
    """Report ``exc`` to PostHog when a client is configured; otherwise a no-op."""

    client = get_posthog_client()
    if client is None:
        return
    try:
        client.capture_exception(exc, distinct_id=distinct_id, properties=properties)
    except Exception:  # pragma: no cover - reporting must not mask the original error
        logger.warning("Failed to report exception to PostHog", exc_info=True)


__all__ = [
    "capture_exception",
    "configure_posthog",
    "get_posthog_client",
]
