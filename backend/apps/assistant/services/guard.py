"""Per-user rate limiting of out-of-scope assistant questions."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional
from uuid import UUID

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Case, DateTimeField, F, IntegerField, Q, Value, When
from django.utils import timezone

from apps.assistant import models

logger = logging.getLogger(__name__)

MAX_OUT_OF_CONTEXT = 3
WINDOW_HOURS = 24
BLOCK_HOURS = 24


class LimitState(str, enum.Enum):
    CLEAR = "clear"
    WARNED = "warned"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class GuardDecision:
    state: LimitState
    count: int
    remaining: int
    blocked_until: Optional[datetime] = None

    @property
    def blocked(self) -> bool:
        return self.state is LimitState.BLOCKED


@dataclass(frozen=True)
class LimitPolicy:
    max_out_of_context: int = MAX_OUT_OF_CONTEXT
    window: timedelta = timedelta(hours=WINDOW_HOURS)
    block: timedelta = timedelta(hours=BLOCK_HOURS)
    fail_open: bool = True

    @classmethod
    def from_settings(cls) -> "LimitPolicy":
        limits = getattr(settings, "ASSISTANT_LIMITS", {})
        return cls(
            max_out_of_context=int(limits.get("max_out_of_context", MAX_OUT_OF_CONTEXT)),
            window=timedelta(hours=float(limits.get("window_hours", WINDOW_HOURS))),
            block=timedelta(hours=float(limits.get("block_hours", BLOCK_HOURS))),
            fail_open=bool(limits.get("fail_open", True)),
        )


class AssistantBlocked(Exception):
    def __init__(self, blocked_until: Optional[datetime]) -> None:
        super().__init__("Assistant access is temporarily blocked")
        self.blocked_until = blocked_until


class LimitUnavailable(Exception):
    """The limit record could not be read and the policy is fail-closed."""


class OutOfContextGuard:
    def __init__(
        self,
        policy: Optional[LimitPolicy] = None,
        *,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self.policy = policy or LimitPolicy.from_settings()
        self._clock = clock

    def load_limit(self, user_id: UUID | str) -> Optional[models.AssistantUserLimit]:
        """Return the user's limit record; ``None`` means no out-of-scope history."""

        try:
            return models.AssistantUserLimit.objects.filter(user_id=user_id).first()
        except DatabaseError as exc:
            if self.policy.fail_open:
                logger.warning("Limit lookup failed for %s, failing open: %s", user_id, exc)
                return None
            logger.error("Limit lookup failed for %s, failing closed: %s", user_id, exc)
            raise LimitUnavailable(str(exc)) from exc

    def check(self, user_id: UUID | str) -> GuardDecision:
        try:
            record = self.load_limit(user_id)
        except LimitUnavailable:
            return GuardDecision(LimitState.BLOCKED, count=0, remaining=0)
        return self.decide(record, self._clock())

    def decide(
        self, record: Optional[models.AssistantUserLimit], now: datetime
    ) -> GuardDecision:
        maximum = self.policy.max_out_of_context
        if record is None:
            return GuardDecision(LimitState.CLEAR, count=0, remaining=maximum)

        if record.blocked_until is not None:
            if now < record.blocked_until:
                return GuardDecision(
                    LimitState.BLOCKED,
                    count=record.out_of_context_count,
                    remaining=0,
                    blocked_until=record.blocked_until,
                )
            # Lapsed block: the next out-of-scope question opens a fresh window.
            return GuardDecision(LimitState.CLEAR, count=0, remaining=maximum)

        if now >= record.window_start + self.policy.window or record.out_of_context_count == 0:
            return GuardDecision(LimitState.CLEAR, count=0, remaining=maximum)

        count = record.out_of_context_count
        return GuardDecision(LimitState.WARNED, count=count, remaining=max(maximum - count, 0))

    def register_out_of_context(self, user_id: UUID | str) -> GuardDecision:
        """Count one out-of-scope question and block the user once the limit is hit.

        Counter and block marker change through conditional UPDATEs so that
        concurrent requests for the same user cannot lose increments.
        """

        now = self._clock()
        with transaction.atomic():
            if not self._increment(user_id, now):
                try:
                    with transaction.atomic():
                        models.AssistantUserLimit.objects.create(
                            user_id=user_id,
                            out_of_context_count=1,
                            window_start=now,
                        )
                except IntegrityError:
                    self._increment(user_id, now)

            models.AssistantUserLimit.objects.filter(
                user_id=user_id,
                out_of_context_count__gte=self.policy.max_out_of_context,
                blocked_until__isnull=True,
            ).update(blocked_until=now + self.policy.block, updated_at=now)

            record = models.AssistantUserLimit.objects.get(user_id=user_id)

        decision = self.decide(record, now)
        logger.info(
            "Out-of-scope question for %s: count=%s state=%s",
            user_id,
            decision.count,
            decision.state.value,
        )
        return decision

    def _increment(self, user_id: UUID | str, now: datetime) -> bool:
        lapsed = Q(window_start__lte=now - self.policy.window) | Q(blocked_until__lte=now)
        updated = models.AssistantUserLimit.objects.filter(user_id=user_id).update(
            out_of_context_count=Case(
                When(lapsed, then=Value(1)),
                default=F("out_of_context_count") + 1,
                output_field=IntegerField(),
            ),
            window_start=Case(
                When(lapsed, then=Value(now)),
                default=F("window_start"),
                output_field=DateTimeField(),
            ),
            blocked_until=Case(
                When(blocked_until__lte=now, then=Value(None)),
                default=F("blocked_until"),
                output_field=DateTimeField(),
            ),
            updated_at=now,
        )
        return updated > 0


__all__ = [
    "BLOCK_HOURS",
    "MAX_OUT_OF_CONTEXT",
    "WINDOW_HOURS",
    "AssistantBlocked",
    "GuardDecision",
    "LimitPolicy",
    "LimitState",
    "LimitUnavailable",
    "OutOfContextGuard",
]
