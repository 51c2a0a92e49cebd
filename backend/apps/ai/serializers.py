"""Serializers for AI settings APIs."""

from rest_framework import serializers

from . import models


class UserAISettingsSerializer(serializers.ModelSerializer):
    has_api_key = serializers.SerializerMethodField()

    class Meta:
        model = models.UserAISettings
        fields = [
            "ai_provider",
            "ai_model",
            "ai_api_key",
            "ai_base_url",
            "has_api_key",
            "updated_at",
        ]
        read_only_fields = ["has_api_key", "updated_at"]
        extra_kwargs = {
            "ai_api_key": {"write_only": True, "required": False, "allow_blank": True},
            "ai_model": {"required": False, "allow_blank": True},
            "ai_base_url": {"required": False, "allow_blank": True},
            "ai_provider": {"required": False},
        }

    def get_has_api_key(self, obj) -> bool:
        return bool(obj.ai_api_key)

    def validate(self, attrs):
        provider = attrs.get("ai_provider", getattr(self.instance, "ai_provider", None))
        base_url = attrs.get("ai_base_url", getattr(self.instance, "ai_base_url", ""))
        if provider == models.AIProvider.LOCAL and not base_url:
            raise serializers.ValidationError({"ai_base_url": "Local provider requires a base URL"})
        return attrs


class ConnectionTestSerializer(serializers.Serializer):
    provider = serializers.ChoiceField(choices=models.AIProvider.choices)
    model = serializers.CharField(required=False, allow_blank=True)
    api_key = serializers.CharField(required=False, allow_blank=True)
    base_url = serializers.CharField(required=False, allow_blank=True)
    test_prompt = serializers.CharField(required=False, allow_blank=True)
