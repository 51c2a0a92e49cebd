"""Management command that signs in and keeps the session alive until it expires."""

from __future__ import annotations

import getpass
from typing import Optional

from django.core.management.base import BaseCommand, CommandError

from apps.accounts.services import (
    AuthError,
    SessionMonitor,
    SessionValidator,
    build_auth_client,
)


class Command(BaseCommand):
    help = "Sign in to the auth backend and validate the session on a timer"

    def add_arguments(self, parser):  # type: ignore[override]
        parser.add_argument("--email", dest="email", required=True, help="Account email")
        parser.add_argument(
            "--password",
            dest="password",
            default=None,
            help="Account password (prompted when omitted)",
        )
        parser.add_argument(
            "--interval",
            dest="interval",
            type=float,
            default=None,
            help="Seconds between session checks (defaults to settings)",
        )
        parser.add_argument(
            "--duration",
            dest="duration",
            type=float,
            default=None,
            help="Stop after this many seconds instead of waiting for expiry",
        )

    def handle(self, *args, **options):  # type: ignore[override]
        email: str = options["email"]
        password: str = options["password"] or getpass.getpass("Password: ")
        interval: Optional[float] = options["interval"]
        duration: Optional[float] = options["duration"]

        client = build_auth_client()
        try:
            session = client.sign_in_with_password(email, password)
        except AuthError as exc:
            raise CommandError(f"Sign-in failed: {exc.message}") from exc

        self.stdout.write(self.style.SUCCESS(f"Signed in as {session.user.email or session.user.id}"))

        monitor: SessionMonitor

        def _on_expired(message: str) -> None:
            self.stderr.write(self.style.ERROR(message))
            monitor.stop()

        def _on_warning(message: str) -> None:
            self.stderr.write(self.style.WARNING(message))

        validator = SessionValidator(client, on_expired=_on_expired, on_warning=_on_warning)
        monitor = SessionMonitor(validator, interval=interval)

        with monitor:
            expired = monitor.wait(duration)

        if expired:
            validator.acknowledge_expiry()
            self.stdout.write("Signed out after session expiry")
        else:
            client.sign_out()
            self.stdout.write("Monitoring finished; signed out")
