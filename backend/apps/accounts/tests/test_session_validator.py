"""Tests for session validation and the background monitor."""

from __future__ import annotations

import httpx

from apps.accounts.services import (
    REFRESH_FAILED_WARNING,
    SESSION_EXPIRED_MESSAGE,
    AuthClient,
    AuthEvent,
    SessionMonitor,
    SessionValidator,
)

NOW = 1_700_000_000.0


class Clock:
    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _payload(access: str, expires_at: float) -> dict:
    return {
        "access_token": access,
        "refresh_token": f"refresh-{access}",
        "expires_at": expires_at,
        "user": {"id": "6f1c8a52-5f0e-4a8e-9d3c-2d6c0b1e7a10", "email": "pm@example.com"},
    }


class Backend:
    """Scripted auth backend recording every request."""

    def __init__(
        self, expires_at: float, *, refresh_status: int = 200, refresh_html: bool = False
    ) -> None:
        self.expires_at = expires_at
        self.refresh_status = refresh_status
        self.refresh_html = refresh_html
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        grant = request.url.params.get("grant_type")
        self.requests.append(grant or request.url.path)
        if grant == "password":
            return httpx.Response(200, json=_payload("first", self.expires_at))
        if grant == "refresh_token":
            if self.refresh_html:
                return httpx.Response(200, text="<html>gateway</html>")
            if self.refresh_status != 200:
                return httpx.Response(self.refresh_status, json={"msg": "refresh failed"})
            return httpx.Response(200, json=_payload("second", NOW + 3600))
        return httpx.Response(204)

    @property
    def refresh_calls(self) -> int:
        return self.requests.count("refresh_token")


def _signed_in(backend: Backend, clock: Clock):
    client = AuthClient(
        base_url="https://auth.test",
        api_key="anon",
        transport=httpx.MockTransport(backend),
        clock=clock,
    )
    client.sign_in_with_password("pm@example.com", "pw")
    expired: list[str] = []
    warnings: list[str] = []
    validator = SessionValidator(
        client,
        on_expired=expired.append,
        on_warning=warnings.append,
        refresh_threshold=300,
        clock=clock,
    )
    return client, validator, expired, warnings


def test_expired_token_triggers_callback_and_returns_false():
    clock = Clock()
    _, validator, expired, warnings = _signed_in(Backend(NOW - 1), clock)

    assert validator.validate_session() is False
    assert expired == [SESSION_EXPIRED_MESSAGE]
    assert warnings == []


def test_expiring_token_is_refreshed_exactly_once():
    clock = Clock()
    backend = Backend(NOW + 120)
    client, validator, expired, warnings = _signed_in(backend, clock)

    assert validator.validate_session() is True
    assert backend.refresh_calls == 1
    assert client.session.access_token == "second"
    assert expired == []
    assert warnings == []


def test_failed_refresh_warns_but_keeps_session_usable():
    clock = Clock()
    backend = Backend(NOW + 120, refresh_status=500)
    client, validator, expired, warnings = _signed_in(backend, clock)

    assert validator.validate_session() is True
    assert backend.refresh_calls == 1
    assert warnings == [REFRESH_FAILED_WARNING]
    assert expired == []
    assert client.session.access_token == "first"


def test_unparseable_refresh_response_warns_but_keeps_session_usable():
    clock = Clock()
    backend = Backend(NOW + 120, refresh_html=True)
    client, validator, expired, warnings = _signed_in(backend, clock)

    assert validator.validate_session() is True
    assert backend.refresh_calls == 1
    assert warnings == [REFRESH_FAILED_WARNING]
    assert expired == []
    assert client.session.access_token == "first"


def test_token_is_expired_at_its_expiry_instant():
    clock = Clock()
    _, validator, expired, _ = _signed_in(Backend(NOW), clock)

    assert validator.validate_session() is False
    assert expired == [SESSION_EXPIRED_MESSAGE]


def test_healthy_session_is_left_alone():
    clock = Clock()
    backend = Backend(NOW + 3600)
    _, validator, expired, warnings = _signed_in(backend, clock)

    assert validator.validate_session() is True
    assert backend.refresh_calls == 0
    assert expired == warnings == []


def test_never_authenticated_is_a_no_op():
    client = AuthClient(
        base_url="https://auth.test",
        api_key="anon",
        transport=httpx.MockTransport(lambda request: httpx.Response(500)),
    )
    expired: list[str] = []
    validator = SessionValidator(client, on_expired=expired.append, refresh_threshold=300)

    assert validator.validate_session() is False
    assert expired == []


def test_expiry_notice_fires_once_per_lease():
    clock = Clock()
    client, validator, expired, _ = _signed_in(Backend(NOW + 3600), clock)
    client.on_auth_state_change(validator.handle_auth_event)

    clock.now = NOW + 4000
    assert validator.validate_session() is False
    assert validator.validate_session() is False
    assert expired == [SESSION_EXPIRED_MESSAGE]

    client.sign_in_with_password("pm@example.com", "pw")
    clock.now = NOW + 8000
    assert validator.validate_session() is False
    assert len(expired) == 2


def test_remote_sign_out_event_takes_expired_path():
    clock = Clock()
    _, validator, expired, _ = _signed_in(Backend(NOW + 3600), clock)

    validator.handle_auth_event(AuthEvent.SIGNED_OUT, None)

    assert expired == [SESSION_EXPIRED_MESSAGE]


def test_acknowledge_expiry_signs_out_without_second_notice():
    clock = Clock()
    backend = Backend(NOW - 1)
    client, validator, expired, _ = _signed_in(backend, clock)
    client.on_auth_state_change(validator.handle_auth_event)

    validator.validate_session()
    validator.acknowledge_expiry()

    assert client.session is None
    assert "/auth/v1/logout" in backend.requests
    assert validator.was_authenticated is False
    assert expired == [SESSION_EXPIRED_MESSAGE]


def test_monitor_runs_initial_check_and_stops_cleanly():
    clock = Clock()
    client, validator, expired, _ = _signed_in(Backend(NOW - 1), clock)
    monitor = SessionMonitor(validator, interval=60, initial_delay=0.01)

    def _stop_on_expiry(message: str) -> None:
        expired.append(message)
        monitor.stop()

    validator.on_expired = _stop_on_expiry

    with monitor:
        assert monitor.wait(5) is True

    assert expired == [SESSION_EXPIRED_MESSAGE]
    assert monitor.running is False
    assert client._listeners == []


def test_monitor_stop_is_idempotent():
    clock = Clock()
    _, validator, _, _ = _signed_in(Backend(NOW + 3600), clock)
    monitor = SessionMonitor(validator, interval=60, initial_delay=60)

    monitor.start()
    assert monitor.running is True
    monitor.stop(timeout=1)
    monitor.stop(timeout=1)

    assert monitor.running is False
