"""App configuration for the core utilities."""

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


def _bootstrap_posthog() -> None:
    logger.debug("Starting PostHog bootstrap")
    from .posthog import configure_posthog

    client = configure_posthog()
    logger.debug("PostHog bootstrap complete (enabled=%s)", client is not None)


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.core"
    verbose_name = "Core"

    def ready(self) -> None:  # pragma: no cover - executed at app startup
        logger.info("CoreConfig.ready() starting")
        _bootstrap_posthog()
        logger.info("CoreConfig.ready() complete")
