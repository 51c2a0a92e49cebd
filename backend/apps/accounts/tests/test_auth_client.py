"""Tests for the auth backend client."""

from __future__ import annotations

import json

import httpx
import pytest

from apps.accounts.services import AuthClient, AuthError, AuthEvent, SessionExpired

NOW = 1_700_000_000.0


def _token_payload(access: str = "access-1", *, expires_at: float | None = NOW + 3600) -> dict:
    payload = {
        "access_token": access,
        "refresh_token": f"refresh-for-{access}",
        "token_type": "bearer",
        "expires_in": 3600,
        "user": {
            "id": "6f1c8a52-5f0e-4a8e-9d3c-2d6c0b1e7a10",
            "email": "manager@example.com",
            "app_metadata": {"role": "admin"},
        },
    }
    if expires_at is not None:
        payload["expires_at"] = expires_at
    return payload


def _client(handler) -> AuthClient:
    return AuthClient(
        base_url="https://auth.test/",
        api_key="anon",
        transport=httpx.MockTransport(handler),
        clock=lambda: NOW,
    )


def test_sign_in_stores_session_and_emits_event():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/auth/v1/token"
        assert request.url.params["grant_type"] == "password"
        assert request.headers["apikey"] == "anon"
        assert json.loads(request.content) == {"email": "a@b.c", "password": "pw"}
        return httpx.Response(200, json=_token_payload())

    client = _client(handler)
    client.on_auth_state_change(lambda event, session: seen.append(event))

    session = client.sign_in_with_password("a@b.c", "pw")

    assert client.session == session
    assert session.expires_at == NOW + 3600
    assert session.user.is_admin is True
    assert seen == [AuthEvent.SIGNED_IN]


def test_session_expiry_falls_back_to_expires_in():
    client = _client(lambda request: httpx.Response(200, json=_token_payload(expires_at=None)))

    session = client.sign_in_with_password("a@b.c", "pw")

    assert session.expires_at == NOW + 3600
    assert session.is_expired(NOW + 3600) is True
    assert session.is_expired(NOW + 3599) is False


def test_refresh_uses_refresh_token_and_emits_event():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        grant = request.url.params["grant_type"]
        calls.append(grant)
        if grant == "refresh_token":
            assert json.loads(request.content) == {"refresh_token": "refresh-for-access-1"}
            return httpx.Response(200, json=_token_payload("access-2"))
        return httpx.Response(200, json=_token_payload())

    client = _client(handler)
    events = []
    client.on_auth_state_change(lambda event, session: events.append(event))
    client.sign_in_with_password("a@b.c", "pw")

    refreshed = client.refresh_session()

    assert refreshed.access_token == "access-2"
    assert client.session.access_token == "access-2"
    assert calls == ["password", "refresh_token"]
    assert events == [AuthEvent.SIGNED_IN, AuthEvent.TOKEN_REFRESHED]


def test_refresh_without_session_raises_session_expired():
    client = _client(lambda request: httpx.Response(500))

    with pytest.raises(SessionExpired):
        client.refresh_session()


def test_sign_out_clears_local_session_even_when_backend_fails():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/auth/v1/logout":
            return httpx.Response(503, json={"msg": "unavailable"})
        return httpx.Response(200, json=_token_payload())

    client = _client(handler)
    events = []
    client.sign_in_with_password("a@b.c", "pw")
    client.on_auth_state_change(lambda event, session: events.append((event, session)))

    client.sign_out()

    assert client.session is None
    assert events == [(AuthEvent.SIGNED_OUT, None)]


def test_error_response_carries_status_and_message():
    client = _client(
        lambda request: httpx.Response(400, json={"error_description": "Invalid login credentials"})
    )

    with pytest.raises(AuthError) as excinfo:
        client.sign_in_with_password("a@b.c", "wrong")

    assert excinfo.value.status == 400
    assert excinfo.value.message == "Invalid login credentials"
    assert client.session is None


def test_unreachable_backend_raises_auth_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    client = _client(handler)

    with pytest.raises(AuthError) as excinfo:
        client.get_user("token")

    assert excinfo.value.status is None


def test_unsubscribed_listener_stops_receiving_events():
    client = _client(lambda request: httpx.Response(200, json=_token_payload()))
    events = []
    subscription = client.on_auth_state_change(lambda event, session: events.append(event))

    subscription.unsubscribe()
    client.sign_in_with_password("a@b.c", "pw")

    assert events == []
    assert subscription.active is False


def test_non_json_success_body_raises_auth_error():
    client = _client(lambda request: httpx.Response(200, text="<html>gateway</html>"))

    with pytest.raises(AuthError) as excinfo:
        client.get_user("token")

    assert excinfo.value.status == 200
    assert excinfo.value.message == "Auth backend returned invalid JSON"
