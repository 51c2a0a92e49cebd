"""REST API endpoints for AI provider settings."""

from __future__ import annotations

from django.urls import path
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.ai import models, serializers
from apps.ai.services import (
    ProviderConfig,
    check_connection,
    provider_config_for_user,
    update_user_settings,
)

app_name = "ai"


class UserAISettingsView(APIView):
    """Read or update the caller's AI provider settings."""

    def get(self, request, *args, **kwargs):
        record = models.UserAISettings.objects.filter(user_id=request.user.id).first()
        if record is None:
            record = models.UserAISettings(user_id=request.user.id)
        return Response(serializers.UserAISettingsSerializer(record).data)

    def put(self, request, *args, **kwargs):
        record = models.UserAISettings.objects.filter(user_id=request.user.id).first()
        serializer = serializers.UserAISettingsSerializer(record, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        record = update_user_settings(request.user.id, dict(serializer.validated_data))
        return Response(serializers.UserAISettingsSerializer(record).data)


class ConnectionTestView(APIView):
    """Try a provider, filling omitted fields from the caller's saved settings."""

    def post(self, request, *args, **kwargs):
        serializer = serializers.ConnectionTestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"detail": "Provider is required"}, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        saved = provider_config_for_user(request.user.id)
        if saved.provider != data["provider"]:
            saved = ProviderConfig(provider=data["provider"])
        config = ProviderConfig(
            provider=data["provider"],
            model=data.get("model") or saved.model,
            api_key=data.get("api_key") or saved.api_key,
            base_url=data.get("base_url") or saved.base_url,
        )
        result = check_connection(config, prompt=data.get("test_prompt") or None)
        return Response(
            {"success": result.success, "message": result.message, "model": result.model}
        )


urlpatterns = [
    path("settings/", UserAISettingsView.as_view(), name="settings"),
    path("test-connection/", ConnectionTestView.as_view(), name="test-connection"),
]
