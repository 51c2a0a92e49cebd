"""API tests for AI settings endpoints."""

from __future__ import annotations

import uuid
from unittest.mock import patch

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from apps.accounts.authentication import AuthenticatedUser
from apps.ai import models
from apps.ai.services import (
    ConnectionTestResult,
    provider_config_for_user,
    update_user_settings,
)

USER = AuthenticatedUser(id=uuid.UUID("6f1c8a52-5f0e-4a8e-9d3c-2d6c0b1e7a10"), email="pm@example.com")


@pytest.fixture()
def client() -> APIClient:
    api_client = APIClient()
    api_client.force_authenticate(user=USER)
    return api_client


@pytest.mark.django_db()
def test_settings_default_to_lovable(client):
    response = client.get(reverse("ai:settings"))

    assert response.status_code == 200
    data = response.json()
    assert data["ai_provider"] == "lovable"
    assert data["has_api_key"] is False
    assert "ai_api_key" not in data


@pytest.mark.django_db()
def test_settings_update_hides_api_key(client):
    response = client.put(
        reverse("ai:settings"),
        {"ai_provider": "openai", "ai_model": "gpt-4o", "ai_api_key": "sk-user"},
        format="json",
    )

    assert response.status_code == 200
    data = response.json()
    assert data["ai_provider"] == "openai"
    assert data["has_api_key"] is True
    assert "ai_api_key" not in data

    config = provider_config_for_user(USER.id)
    assert config.provider == "openai"
    assert config.model == "gpt-4o"
    assert config.api_key == "sk-user"


@pytest.mark.django_db()
def test_local_provider_requires_base_url(client):
    response = client.put(reverse("ai:settings"), {"ai_provider": "local"}, format="json")

    assert response.status_code == 400
    assert "ai_base_url" in response.json()
    assert not models.UserAISettings.objects.exists()


@pytest.mark.django_db()
def test_unknown_provider_is_rejected(client):
    response = client.put(reverse("ai:settings"), {"ai_provider": "mystery"}, format="json")

    assert response.status_code == 400


def test_connection_test_requires_provider(client):
    response = client.post(reverse("ai:test-connection"), {}, format="json")

    assert response.status_code == 400
    assert response.json()["detail"] == "Provider is required"


@pytest.mark.django_db()
def test_connection_test_returns_result(client):
    result = ConnectionTestResult(success=True, message="Connection successful: OK", model="gpt-4o")

    with patch("apps.ai.api.check_connection", return_value=result) as mock_check:
        response = client.post(
            reverse("ai:test-connection"),
            {"provider": "openai", "model": "gpt-4o", "api_key": "sk-user", "test_prompt": "ping"},
            format="json",
        )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Connection successful: OK",
        "model": "gpt-4o",
    }
    config = mock_check.call_args.args[0]
    assert config.provider == "openai"
    assert config.api_key == "sk-user"
    assert mock_check.call_args.kwargs["prompt"] == "ping"


@pytest.mark.django_db()
def test_connection_test_falls_back_to_saved_key(client):
    update_user_settings(
        USER.id, {"ai_provider": "openai", "ai_model": "gpt-4o-mini", "ai_api_key": "sk-saved"}
    )
    result = ConnectionTestResult(
        success=True, message="Connection successful: OK", model="gpt-4o-mini"
    )

    with patch("apps.ai.api.check_connection", return_value=result) as mock_check:
        response = client.post(
            reverse("ai:test-connection"), {"provider": "openai"}, format="json"
        )

    assert response.status_code == 200
    config = mock_check.call_args.args[0]
    assert config.api_key == "sk-saved"
    assert config.model == "gpt-4o-mini"
    assert mock_check.call_args.kwargs["prompt"] is None


@pytest.mark.django_db()
def test_connection_test_ignores_saved_key_for_other_provider(client):
    update_user_settings(USER.id, {"ai_provider": "openai", "ai_api_key": "sk-saved"})
    result = ConnectionTestResult(success=False, message="Missing API key", model="")

    with patch("apps.ai.api.check_connection", return_value=result) as mock_check:
        response = client.post(
            reverse("ai:test-connection"), {"provider": "openrouter"}, format="json"
        )

    assert response.status_code == 200
    config = mock_check.call_args.args[0]
    assert config.provider == "openrouter"
    assert config.api_key is None


def test_settings_require_authentication():
    response = APIClient().get(reverse("ai:settings"))

    assert response.status_code == 401
