"""Tests for the monitor_session management command."""

from __future__ import annotations

import time
from io import StringIO
from unittest.mock import patch

import httpx
import pytest
from django.core.management import CommandError, call_command

from apps.accounts.services import AuthClient


def _build_client(expires_in: float, token_status: int = 200):
    requests: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request.url.path)
        if request.url.path == "/auth/v1/logout":
            return httpx.Response(204)
        if token_status != 200:
            return httpx.Response(token_status, json={"msg": "Invalid login credentials"})
        return httpx.Response(
            200,
            json={
                "access_token": "access",
                "refresh_token": "refresh",
                "expires_at": time.time() + expires_in,
                "user": {"id": "6f1c8a52-5f0e-4a8e-9d3c-2d6c0b1e7a10", "email": "pm@example.com"},
            },
        )

    def _build(**kwargs):
        return AuthClient(
            base_url="https://auth.test",
            api_key="anon-test-key",
            transport=httpx.MockTransport(handler),
        )

    return _build, requests


def test_command_signs_out_when_session_expires():
    build, requests = _build_client(expires_in=-1)
    stdout, stderr = StringIO(), StringIO()

    with patch("apps.accounts.management.commands.monitor_session.build_auth_client", build):
        call_command(
            "monitor_session",
            "--email=pm@example.com",
            "--password=pw",
            "--interval=0.05",
            "--duration=5",
            stdout=stdout,
            stderr=stderr,
        )

    assert "Signed in as pm@example.com" in stdout.getvalue()
    assert "Your session has expired" in stderr.getvalue()
    assert "Signed out after session expiry" in stdout.getvalue()
    assert requests.count("/auth/v1/logout") == 1


def test_command_stops_after_duration():
    build, requests = _build_client(expires_in=3600)
    stdout = StringIO()

    with patch("apps.accounts.management.commands.monitor_session.build_auth_client", build):
        call_command(
            "monitor_session",
            "--email=pm@example.com",
            "--password=pw",
            "--interval=0.05",
            "--duration=0.2",
            stdout=stdout,
            stderr=StringIO(),
        )

    assert "Monitoring finished; signed out" in stdout.getvalue()
    assert requests[-1] == "/auth/v1/logout"


def test_command_reports_sign_in_failure():
    build, _ = _build_client(expires_in=3600, token_status=400)

    with patch("apps.accounts.management.commands.monitor_session.build_auth_client", build):
        with pytest.raises(CommandError, match="Invalid login credentials"):
            call_command("monitor_session", "--email=pm@example.com", "--password=wrong")
