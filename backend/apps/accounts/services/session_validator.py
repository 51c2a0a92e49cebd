"""Keep the client's view of its auth session in line with the token lifetime."""

from __future__ import annotations

import logging
import time
from threading import Event, Lock, Thread, current_thread
from typing import Callable, Optional

from django.conf import settings

from .auth_client import AuthClient, AuthError, AuthEvent, AuthSession, Subscription

logger = logging.getLogger(__name__)

DEFAULT_CHECK_INTERVAL_SECONDS = 30.0
DEFAULT_INITIAL_DELAY_SECONDS = 1.0
DEFAULT_REFRESH_THRESHOLD_SECONDS = 300.0

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please sign in again."
REFRESH_FAILED_WARNING = (
    "We could not renew your session. Save your work; you may need to sign in again soon."
)


class SessionValidator:
    """Decide whether the current session is usable, refreshing it proactively.

    ``on_expired`` plays the part of the blocking modal: it fires at most once
    per lease and the forced sign-out happens only in :meth:`acknowledge_expiry`.
    ``on_warning`` is the non-blocking notice shown when a proactive refresh
    fails while the token is still valid.
    """

    def __init__(
        self,
        client: AuthClient,
        *,
        on_expired: Callable[[str], None],
        on_warning: Callable[[str], None] | None = None,
        refresh_threshold: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.client = client
        self.on_expired = on_expired
        self.on_warning = on_warning or (lambda message: None)
        if refresh_threshold is None:
            refresh_threshold = float(
                getattr(
                    settings,
                    "SESSION_REFRESH_THRESHOLD_SECONDS",
                    DEFAULT_REFRESH_THRESHOLD_SECONDS,
                )
            )
        self.refresh_threshold = refresh_threshold
        self._clock = clock
        self._was_authenticated = client.session is not None
        self._expiry_notified = False

    @property
    def was_authenticated(self) -> bool:
        return self._was_authenticated

    def validate_session(self) -> bool:
        """Return whether the session is usable.

        Not side-effect free: may refresh the stored session, emit a warning,
        or raise the expired-session notice.
        """

        if not self._was_authenticated:
            return False

        try:
            session = self.client.get_session()
        except AuthError as exc:
            logger.warning("Session fetch failed: %s", exc.message)
            session = None

        if session is None:
            self._expire("no active session")
            return False

        now = self._clock()
        if session.is_expired(now):
            self._expire("token expired")
            return False

        time_to_expiry = session.time_to_expiry(now)
        if time_to_expiry < self.refresh_threshold:
            self._refresh(time_to_expiry)

        return True

    def handle_auth_event(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        if event == AuthEvent.SIGNED_IN:
            self._was_authenticated = True
            self._expiry_notified = False
        elif event == AuthEvent.TOKEN_REFRESHED:
            logger.debug("Token refreshed successfully")
        elif event == AuthEvent.SIGNED_OUT and self._was_authenticated:
            self._expire("signed out")

    def acknowledge_expiry(self) -> None:
        """User acknowledged the expiry notice: force the sign-out."""

        self._was_authenticated = False
        self._expiry_notified = False
        self.client.sign_out()

    def _refresh(self, time_to_expiry: float) -> None:
        logger.info("Session expires in %.0fs; refreshing", time_to_expiry)
        try:
            self.client.refresh_session()
        except AuthError as exc:
            # Token may still be valid for a short while; do not force logout.
            logger.warning("Proactive session refresh failed: %s", exc.message)
            self.on_warning(REFRESH_FAILED_WARNING)

    def _expire(self, reason: str) -> None:
        if not self._was_authenticated or self._expiry_notified:
            return
        logger.warning("Session expired (%s)", reason)
        self._expiry_notified = True
        self.on_expired(SESSION_EXPIRED_MESSAGE)


class SessionMonitor:
    """Run a :class:`SessionValidator` on a timer and on auth-state events."""

    def __init__(
        self,
        validator: SessionValidator,
        *,
        interval: float | None = None,
        initial_delay: float = DEFAULT_INITIAL_DELAY_SECONDS,
    ) -> None:
        if interval is None:
            interval = float(
                getattr(settings, "SESSION_CHECK_INTERVAL_SECONDS", DEFAULT_CHECK_INTERVAL_SECONDS)
            )
        self.validator = validator
        self.interval = interval
        self.initial_delay = initial_delay
        self._stop = Event()
        self._thread: Thread | None = None
        self._subscription: Subscription | None = None
        self._lock = Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None:
                return
            self._stop.clear()
            self._subscription = self.validator.client.on_auth_state_change(
                self.validator.handle_auth_event
            )
            self._thread = Thread(target=self._run, name="session-monitor", daemon=True)
            self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        with self._lock:
            thread = self._thread
            subscription = self._subscription
            self._thread = None
            self._subscription = None

        self._stop.set()
        if subscription is not None:
            subscription.unsubscribe()
        if thread is not None and thread is not current_thread():
            thread.join(timeout)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the monitor is stopped; returns ``True`` if it was."""

        return self._stop.wait(timeout)

    def __enter__(self) -> "SessionMonitor":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    def _run(self) -> None:
        delay = self.initial_delay
        while not self._stop.wait(delay):
            try:
                self.validator.validate_session()
            except Exception:  # pragma: no cover - keep the timer alive
                logger.exception("Session validation crashed")
            delay = self.interval


__all__ = [
    "REFRESH_FAILED_WARNING",
    "SESSION_EXPIRED_MESSAGE",
    "SessionMonitor",
    "SessionValidator",
]
