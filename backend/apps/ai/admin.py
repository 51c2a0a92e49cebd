"""Admin registrations for AI provider settings."""

from django.contrib import admin

from . import models


@admin.register(models.UserAISettings)
class UserAISettingsAdmin(admin.ModelAdmin):
    list_display = ("user_id", "ai_provider", "ai_model", "updated_at")
    search_fields = ("user_id", "ai_model")
    list_filter = ("ai_provider",)
    exclude = ("ai_api_key",)
    ordering = ("-updated_at",)
