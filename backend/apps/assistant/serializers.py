"""Serializers for assistant APIs."""

from rest_framework import serializers

from . import models


class ClickedElementSerializer(serializers.Serializer):
    selector = serializers.CharField(required=False, allow_blank=True)
    tag_name = serializers.CharField(required=False, allow_blank=True)
    class_name = serializers.CharField(required=False, allow_blank=True)
    id = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    text_content = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    data_attributes = serializers.DictField(
        child=serializers.CharField(allow_blank=True), required=False
    )


class AssistantQuerySerializer(serializers.Serializer):
    question = serializers.CharField(max_length=4000)
    clicked_element = ClickedElementSerializer(required=False, allow_null=True)
    current_route = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class FeedbackScoreSerializer(serializers.Serializer):
    score = serializers.ChoiceField(choices=[-1, 1])


class AssistantFeedbackSerializer(serializers.ModelSerializer):
    class Meta:
        model = models.AssistantFeedback
        fields = [
            "id",
            "question",
            "answer",
            "query_type",
            "chunk_ids_used",
            "needs_investigation",
            "feedback_score",
            "resolved",
            "resolved_at",
            "created_at",
        ]
        read_only_fields = fields
