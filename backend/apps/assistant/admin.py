from django.contrib import admin

from . import models


@admin.register(models.AssistantUserLimit)
class AssistantUserLimitAdmin(admin.ModelAdmin):
    list_display = ("user_id", "out_of_context_count", "window_start", "blocked_until")
    search_fields = ("user_id",)


@admin.register(models.AssistantFeedback)
class AssistantFeedbackAdmin(admin.ModelAdmin):
    list_display = (
        "question",
        "query_type",
        "needs_investigation",
        "feedback_score",
        "resolved",
        "created_at",
    )
    list_filter = ("query_type", "needs_investigation", "resolved")
    search_fields = ("question", "answer")
    readonly_fields = ("user_id", "question", "answer", "query_type", "chunk_ids_used", "created_at")


@admin.register(models.KnowledgeChunk)
class KnowledgeChunkAdmin(admin.ModelAdmin):
    list_display = ("chunk_id", "title", "category", "route", "is_active")
    list_filter = ("category", "is_active")
    search_fields = ("chunk_id", "title", "business_description", "technical_description")
