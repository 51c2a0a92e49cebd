"""Client for the managed auth backend (GoTrue-compatible REST API)."""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Optional

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15
ADMIN_ROLE = "admin"


class AuthEvent(str, enum.Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


class AuthError(Exception):
    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class SessionExpired(AuthError):
    def __init__(self, message: str = "Session expired") -> None:
        super().__init__(message, 401)


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: str | None = None
    is_admin: bool = False

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "AuthUser":
        app_metadata = payload.get("app_metadata") or {}
        return cls(
            id=str(payload["id"]),
            email=payload.get("email"),
            is_admin=app_metadata.get("role") == ADMIN_ROLE,
        )


@dataclass(frozen=True)
class AuthSession:
    """A credential lease: valid while ``now < expires_at``, expired otherwise."""

    access_token: str
    refresh_token: str
    user: AuthUser
    issued_at: float
    expires_at: float

    def time_to_expiry(self, now: float) -> float:
        return self.expires_at - now

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    @classmethod
    def from_token_payload(cls, payload: dict[str, Any], *, now: float) -> "AuthSession":
        try:
            access_token = payload["access_token"]
            refresh_token = payload["refresh_token"]
            user = AuthUser.from_payload(payload["user"])
        except (KeyError, TypeError) as exc:
            raise AuthError("Auth backend returned an incomplete session") from exc

        expires_at = payload.get("expires_at")
        if expires_at is None:
            expires_at = now + float(payload.get("expires_in") or 0)

        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            user=user,
            issued_at=now,
            expires_at=float(expires_at),
        )


AuthListener = Callable[[AuthEvent, Optional[AuthSession]], None]


class Subscription:
    """Handle returned by :meth:`AuthClient.on_auth_state_change`."""

    def __init__(self, client: "AuthClient", callback: AuthListener) -> None:
        self._client = client
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._client._remove_listener(self)
            self.active = False


class AuthClient:
    """Holds the current session and talks to the auth backend.

    The stored session may be replaced by background refreshes, so access to
    it is serialised with a lock.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str | None,
        transport: httpx.BaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key or ""
        self._transport = transport
        self._timeout = timeout
        self._clock = clock
        self._session: AuthSession | None = None
        self._listeners: list[Subscription] = []
        self._lock = Lock()

    @property
    def session(self) -> AuthSession | None:
        with self._lock:
            return self._session

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        payload = self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = AuthSession.from_token_payload(payload, now=self._clock())
        self._store(session)
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    def get_session(self) -> AuthSession | None:
        """Return the stored session, or ``None`` when nobody is signed in."""

        with self._lock:
            session = self._session
        if session is not None and not session.access_token:
            raise AuthError("Stored session has no access token")
        return session

    def refresh_session(self) -> AuthSession:
        current = self.session
        if current is None:
            raise SessionExpired("No session to refresh")

        payload = self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": current.refresh_token},
        )
        session = AuthSession.from_token_payload(payload, now=self._clock())
        self._store(session)
        self._emit(AuthEvent.TOKEN_REFRESHED, session)
        return session

    def sign_out(self) -> None:
        """Revoke the session remotely and always clear it locally."""

        current = self.session
        try:
            if current is not None:
                self._request("POST", "/auth/v1/logout", token=current.access_token)
        except AuthError as exc:
            logger.warning("Remote sign-out failed, clearing local session anyway: %s", exc)
        finally:
            self._store(None)
            self._emit(AuthEvent.SIGNED_OUT, None)

    def get_user(self, access_token: str) -> AuthUser:
        payload = self._request("GET", "/auth/v1/user", token=access_token)
        try:
            return AuthUser.from_payload(payload)
        except (KeyError, TypeError) as exc:
            raise AuthError("Auth backend returned an invalid user") from exc

    def on_auth_state_change(self, callback: AuthListener) -> Subscription:
        subscription = Subscription(self, callback)
        with self._lock:
            self._listeners.append(subscription)
        return subscription

    def _remove_listener(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._listeners:
                self._listeners.remove(subscription)

    def _store(self, session: AuthSession | None) -> None:
        with self._lock:
            self._session = session

    def _emit(self, event: AuthEvent, session: AuthSession | None) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for subscription in listeners:
            try:
                subscription.callback(event, session)
            except Exception:  # pragma: no cover - listener bugs must not break auth
                logger.exception("Auth state listener failed for %s", event.value)

    def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        headers = {"apikey": self.api_key}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            with httpx.Client(
                base_url=self.base_url,
                headers=headers,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            raise AuthError(f"Auth backend unreachable: {exc}") from exc

        if response.is_error:
            raise AuthError(_error_message(response), response.status_code)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise AuthError("Auth backend returned invalid JSON", response.status_code) from exc


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        for key in ("error_description", "msg", "message", "error"):
            if payload.get(key):
                return str(payload[key])
    return f"HTTP {response.status_code}"


def build_auth_client(**kwargs: Any) -> AuthClient:
    return AuthClient(
        base_url=getattr(settings, "SUPABASE_URL", ""),
        api_key=getattr(settings, "SUPABASE_ANON_KEY", None),
        **kwargs,
    )


__all__ = [
    "AuthClient",
    "AuthError",
    "AuthEvent",
    "AuthSession",
    "AuthUser",
    "SessionExpired",
    "Subscription",
    "build_auth_client",
]
