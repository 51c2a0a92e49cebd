"""Tests for bearer-token authentication against the auth backend."""

from __future__ import annotations

import uuid
from unittest.mock import patch

import httpx
import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from apps.accounts.services import AuthClient

USER_ID = "6f1c8a52-5f0e-4a8e-9d3c-2d6c0b1e7a10"


def _auth_client(handler):
    def _build(**kwargs):
        return AuthClient(
            base_url="https://auth.test",
            api_key="anon-test-key",
            transport=httpx.MockTransport(handler),
        )

    return _build


def _user_endpoint(request: httpx.Request) -> httpx.Response:
    if request.headers.get("Authorization") != "Bearer good-token":
        return httpx.Response(401, json={"msg": "invalid JWT"})
    return httpx.Response(
        200,
        json={"id": USER_ID, "email": "pm@example.com", "app_metadata": {"role": "admin"}},
    )


@pytest.mark.django_db()
def test_valid_token_authenticates_request():
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION="Bearer good-token")

    with patch("apps.accounts.authentication.build_auth_client", _auth_client(_user_endpoint)):
        response = client.get(reverse("assistant:limits"))

    assert response.status_code == 200
    assert response.json()["state"] == "clear"


def test_invalid_token_is_rejected():
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION="Bearer bad-token")

    with patch("apps.accounts.authentication.build_auth_client", _auth_client(_user_endpoint)):
        response = client.get(reverse("assistant:limits"))

    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized"


def test_missing_header_is_unauthenticated():
    response = APIClient().get(reverse("assistant:limits"))

    assert response.status_code == 401
    assert response["WWW-Authenticate"] == "Bearer"


def test_authenticate_returns_principal_with_staff_flag():
    from rest_framework.test import APIRequestFactory

    from apps.accounts.authentication import SupabaseTokenAuthentication

    request = APIRequestFactory().get("/", HTTP_AUTHORIZATION="Bearer good-token")

    with patch("apps.accounts.authentication.build_auth_client", _auth_client(_user_endpoint)):
        user, token = SupabaseTokenAuthentication().authenticate(request)

    assert user.id == uuid.UUID(USER_ID)
    assert user.is_staff is True
    assert user.is_authenticated is True
    assert token == "good-token"


def test_garbled_user_response_is_unauthorized():
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION="Bearer good-token")

    with patch(
        "apps.accounts.authentication.build_auth_client",
        _auth_client(lambda request: httpx.Response(200, text="<html>gateway</html>")),
    ):
        response = client.get(reverse("assistant:limits"))

    assert response.status_code == 401
