"""Per-user AI provider preferences."""

from __future__ import annotations

from django.db import models


class AIProvider(models.TextChoices):
    LOVABLE = "lovable", "Lovable AI Gateway"
    OPENAI = "openai", "OpenAI"
    OPENROUTER = "openrouter", "OpenRouter"
    LOCAL = "local", "Local (OpenAI-compatible)"


class UserAISettings(models.Model):
    """The recognised AI provider fields of a user's settings row."""

    user_id = models.UUIDField(unique=True)
    ai_provider = models.CharField(
        max_length=16,
        choices=AIProvider.choices,
        default=AIProvider.LOVABLE,
    )
    ai_model = models.CharField(max_length=255, blank=True)
    ai_api_key = models.CharField(max_length=512, blank=True)
    ai_base_url = models.URLField(max_length=512, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "user AI settings"
        verbose_name_plural = "user AI settings"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.user_id} ({self.ai_provider})"
