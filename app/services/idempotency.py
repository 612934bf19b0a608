"""Idempotency guard for provider events.

The INSERT into ``applied_events`` is the gate: a unique-constraint conflict
on ``provider_event_id`` is the only signal that an event was seen before.
There is no prior existence query.

The guard must be the first write of the caller's transaction. On a conflict
it rolls the whole session back; on acceptance it leaves the row pending so
the caller commits it together with the entitlement change it gates.
"""

import logging
from enum import Enum

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.applied_event import AppliedEvent

logger = logging.getLogger(__name__)


class GuardResult(str, Enum):
    ACCEPTED = "accepted"
    ALREADY_APPLIED = "already_applied"


def try_apply(
    db: Session,
    provider_event_id: str,
    *,
    event_type: str,
    target_user_id: int,
) -> tuple[GuardResult, AppliedEvent | None]:
    record = AppliedEvent(
        provider_event_id=provider_event_id,
        event_type=event_type,
        target_user_id=target_user_id,
        changed=False,
    )
    db.add(record)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        logger.info(
            "Replayed provider event ignored",
            extra={"event_id": provider_event_id, "event_type": event_type},
        )
        return GuardResult.ALREADY_APPLIED, None
    return GuardResult.ACCEPTED, record
