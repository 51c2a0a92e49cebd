"""Build provider configurations from persisted user settings."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from django.conf import settings

from apps.ai import models

from .providers import ProviderConfig

_UPDATABLE_FIELDS = ("ai_provider", "ai_model", "ai_api_key", "ai_base_url")


def default_provider_config() -> ProviderConfig:
    """Provider used by server-side features that do not follow user preferences."""

    return ProviderConfig(
        provider=getattr(settings, "ASSISTANT_AI_PROVIDER", models.AIProvider.LOVABLE),
        model=getattr(settings, "ASSISTANT_AI_MODEL", None) or None,
    )


def provider_config_for_user(user_id: UUID | str) -> ProviderConfig:
    record = models.UserAISettings.objects.filter(user_id=user_id).first()
    if record is None:
        return ProviderConfig(provider=models.AIProvider.LOVABLE)
    return ProviderConfig(
        provider=record.ai_provider,
        model=record.ai_model or None,
        api_key=record.ai_api_key or None,
        base_url=record.ai_base_url or None,
    )


def update_user_settings(user_id: UUID | str, changes: dict[str, Any]) -> models.UserAISettings:
    """Apply recognised setting changes; other keys are rejected."""

    unknown = sorted(set(changes) - set(_UPDATABLE_FIELDS))
    if unknown:
        raise ValueError(f"Unrecognised settings: {', '.join(unknown)}")

    record, _ = models.UserAISettings.objects.get_or_create(user_id=user_id)
    for field, value in changes.items():
        setattr(record, field, value or "")
    record.save()
    return record
