"""Entitlement state machine: (state, event) -> (state', applied).

Pure functions over immutable values. Loading and persisting the state is the
caller's job (see ``app.services.entitlement_sync``).

Rules:
    - INITIAL_PURCHASE / RENEWAL / NON_RENEWING_PURCHASE grant access, unless
      the event is older than the last applied one, or it would move an active
      period's end earlier (lifetime counts as the latest possible end).
    - EXPIRATION revokes, always.
    - CANCELLATION only turns auto-renew off; access runs until premium_until.
    - TEST and unknown types change nothing.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum


class EventType(str, Enum):
    INITIAL_PURCHASE = "INITIAL_PURCHASE"
    RENEWAL = "RENEWAL"
    NON_RENEWING_PURCHASE = "NON_RENEWING_PURCHASE"
    CANCELLATION = "CANCELLATION"
    EXPIRATION = "EXPIRATION"
    TEST = "TEST"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: str | None) -> "EventType":
        if not raw:
            return cls.UNKNOWN
        try:
            return cls(raw.strip().upper())
        except ValueError:
            return cls.UNKNOWN


GRANTING_EVENTS = frozenset({
    EventType.INITIAL_PURCHASE,
    EventType.RENEWAL,
    EventType.NON_RENEWING_PURCHASE,
})


class EntitlementStatus(str, Enum):
    FREE = "free"
    ACTIVE = "active"
    # Same access as FREE; kept apart so support can tell "never paid" from "lapsed"
    EXPIRED = "expired"


@dataclass(frozen=True)
class EntitlementState:
    status: EntitlementStatus = EntitlementStatus.FREE
    package_id: int | None = None
    premium_until: datetime | None = None
    last_event_at: datetime | None = None

    @property
    def is_premium(self) -> bool:
        return self.status is EntitlementStatus.ACTIVE


FREE = EntitlementState()


@dataclass(frozen=True)
class EntitlementEvent:
    type: EventType
    occurred_at: datetime
    package_id: int | None = None
    # None on a granting event means non-expiring (lifetime) access
    expires_at: datetime | None = None


@dataclass(frozen=True)
class Transition:
    state: EntitlementState
    applied: bool


def apply(state: EntitlementState, event: EntitlementEvent) -> Transition:
    if event.type in GRANTING_EVENTS:
        return _apply_grant(state, event)
    if event.type is EventType.EXPIRATION:
        expired = EntitlementState(
            status=EntitlementStatus.EXPIRED,
            last_event_at=_latest(state.last_event_at, event.occurred_at),
        )
        return Transition(expired, True)
    # CANCELLATION, TEST, UNKNOWN
    return Transition(state, False)


def _apply_grant(state: EntitlementState, event: EntitlementEvent) -> Transition:
    if state.last_event_at is not None and event.occurred_at < state.last_event_at:
        return Transition(state, False)

    # Period already over when the event happened: granting would break
    # "premium implies premium_until after last_event_at".
    if event.expires_at is not None and event.expires_at <= event.occurred_at:
        return Transition(state, False)

    if state.is_premium and _ends_before(event.expires_at, state.premium_until):
        return Transition(state, False)

    granted = replace(
        state,
        status=EntitlementStatus.ACTIVE,
        package_id=event.package_id,
        premium_until=event.expires_at,
        last_event_at=event.occurred_at,
    )
    return Transition(granted, True)


def _ends_before(candidate: datetime | None, current: datetime | None) -> bool:
    if current is None:
        return candidate is not None
    if candidate is None:
        return False
    return candidate < current


def _latest(a: datetime | None, b: datetime) -> datetime:
    if a is None or b > a:
        return b
    return a


def is_entitled(state: EntitlementState, now: datetime) -> bool:
    """Read-side check: an active row whose period has lapsed grants nothing,
    even before the provider's EXPIRATION arrives."""
    if not state.is_premium:
        return False
    return state.premium_until is None or state.premium_until > now
