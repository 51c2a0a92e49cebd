"""Database models for the documentation assistant and its usage limits."""

from __future__ import annotations

import uuid

from django.db import models


class QueryType(models.TextChoices):
    BUSINESS = "business", "Business"
    TECHNICAL = "technical", "Technical"
    OUT_OF_CONTEXT = "out_of_context", "Out of context"


class AssistantUserLimit(models.Model):
    """Per-user out-of-scope counter and block marker."""

    user_id = models.UUIDField(unique=True)
    out_of_context_count = models.PositiveIntegerField(default=0)
    window_start = models.DateTimeField()
    blocked_until = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.user_id}: {self.out_of_context_count}"


class AssistantFeedback(models.Model):
    """Append-only audit row for every assistant answer, kept for human review."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField()
    question = models.TextField()
    answer = models.TextField()
    query_type = models.CharField(max_length=16, choices=QueryType.choices)
    chunk_ids_used = models.JSONField(default=list, blank=True)
    needs_investigation = models.BooleanField(default=False)
    feedback_score = models.SmallIntegerField(null=True, blank=True)
    resolved = models.BooleanField(default=False)
    resolved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user_id", "created_at"], name="assistant_a_user_id_5a1f0c_idx"),
            models.Index(
                fields=["needs_investigation", "resolved"],
                name="assistant_a_needs_i_8c2e41_idx",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.question[:50]


class KnowledgeChunk(models.Model):
    """A unit of application documentation the assistant answers from."""

    chunk_id = models.CharField(max_length=128, unique=True)
    category = models.CharField(max_length=64)
    audience = models.JSONField(default=list, blank=True)
    title = models.CharField(max_length=255)
    business_description = models.TextField(blank=True)
    technical_description = models.TextField(blank=True)
    route = models.CharField(max_length=255, blank=True)
    related_files = models.JSONField(default=list, blank=True)
    keywords = models.JSONField(default=list, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["category", "title"]
        indexes = [
            models.Index(fields=["is_active", "route"], name="assistant_k_is_acti_3d7b92_idx")
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title
