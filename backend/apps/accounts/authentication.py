"""DRF authentication backed by the managed auth service."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from rest_framework import authentication, exceptions

from apps.accounts.services import AuthError, build_auth_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    """Request principal for a user verified by the auth backend."""

    id: uuid.UUID
    email: str | None = None
    is_staff: bool = False

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_anonymous(self) -> bool:
        return False


class SupabaseTokenAuthentication(authentication.BaseAuthentication):
    keyword = "Bearer"

    def authenticate(self, request):
        header = authentication.get_authorization_header(request).decode("latin-1")
        if not header:
            return None

        parts = header.split()
        if parts[0] != self.keyword:
            return None
        if len(parts) != 2:
            raise exceptions.AuthenticationFailed("Invalid authorization header")

        token = parts[1]
        try:
            auth_user = build_auth_client().get_user(token)
        except AuthError as exc:
            logger.info("Rejected bearer token: %s", exc.message)
            raise exceptions.AuthenticationFailed("Unauthorized") from exc

        try:
            user_id = uuid.UUID(auth_user.id)
        except ValueError as exc:
            raise exceptions.AuthenticationFailed("Unauthorized") from exc

        return (
            AuthenticatedUser(id=user_id, email=auth_user.email, is_staff=auth_user.is_admin),
            token,
        )

    def authenticate_header(self, request) -> str:
        return self.keyword
