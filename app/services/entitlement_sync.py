"""Apply one provider event to a user's stored entitlement, atomically.

The AppliedEvent row and the entitlement update commit together or not at
all. Shared by the RevenueCat webhook and the manual grant script.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import TransientStoreFailure
from app.models.entitlement import UserEntitlement
from app.services import entitlements
from app.services.entitlements import EntitlementEvent, EntitlementState, EntitlementStatus, EventType
from app.services.idempotency import GuardResult, try_apply
from app.utils.dt import as_utc_aware, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    guard: GuardResult
    changed: bool = False
    state: EntitlementState | None = None


def state_from_row(row: UserEntitlement | None) -> EntitlementState:
    if row is None:
        return entitlements.FREE
    return EntitlementState(
        status=EntitlementStatus(row.status),
        package_id=row.package_id,
        premium_until=as_utc_aware(row.premium_until),
        last_event_at=as_utc_aware(row.last_event_at),
    )


def write_state(row: UserEntitlement, state: EntitlementState) -> None:
    row.status = state.status.value
    row.is_premium = state.is_premium
    row.package_id = state.package_id
    row.premium_until = as_utc_aware(state.premium_until)
    row.last_event_at = as_utc_aware(state.last_event_at)


def sync_event(
    db: Session,
    *,
    user_id: int,
    provider_event_id: str,
    event: EntitlementEvent,
) -> SyncResult:
    try:
        guard, record = try_apply(
            db,
            provider_event_id,
            event_type=event.type.value,
            target_user_id=user_id,
        )
        if guard is GuardResult.ALREADY_APPLIED:
            return SyncResult(guard=guard)

        row = db.execute(
            select(UserEntitlement)
            .where(UserEntitlement.user_id == user_id)
            .with_for_update()
        ).scalar_one_or_none()

        current = state_from_row(row)
        transition = entitlements.apply(current, event)
        changed = transition.applied and transition.state != current

        if changed:
            if row is None:
                row = UserEntitlement(user_id=user_id)
                db.add(row)
            write_state(row, transition.state)

        record.changed = changed
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(
            "Entitlement write failed, nothing committed",
            extra={"event_id": provider_event_id, "user_id": user_id},
        )
        raise TransientStoreFailure("Entitlement update could not be committed") from e

    logger.info(
        "Provider event applied",
        extra={
            "event_id": provider_event_id,
            "event_type": event.type.value,
            "user_id": user_id,
            "outcome": "changed" if changed else "unchanged",
        },
    )
    return SyncResult(guard=guard, changed=changed, state=transition.state)


def load_state(db: Session, user_id: int) -> tuple[EntitlementState, UserEntitlement | None]:
    row = db.execute(
        select(UserEntitlement).where(UserEntitlement.user_id == user_id)
    ).scalar_one_or_none()
    return state_from_row(row), row


def manual_override(
    db: Session,
    *,
    user_id: int,
    revoke: bool = False,
    until: datetime | None = None,
    package_id: int | None = None,
    now: datetime | None = None,
) -> SyncResult:
    """Support-staff grant or revoke.

    Goes through the state machine as a synthetic NON_RENEWING_PURCHASE or
    EXPIRATION with a one-off ``manual:`` id, so it is recorded in the
    applied-events log and obeys the same rules as provider events.
    """
    event = EntitlementEvent(
        type=EventType.EXPIRATION if revoke else EventType.NON_RENEWING_PURCHASE,
        occurred_at=now or utcnow(),
        package_id=None if revoke else package_id,
        expires_at=None if revoke else until,
    )
    return sync_event(
        db,
        user_id=user_id,
        provider_event_id=f"manual:{uuid4()}",
        event=event,
    )
