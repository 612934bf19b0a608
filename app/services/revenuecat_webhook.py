"""RevenueCat webhook ingestion.

``handle_webhook`` takes the raw Authorization header and request body and
returns a ``WebhookOutcome``; it never raises. RevenueCat retries any non-2xx
delivery, so only transient failures map to 5xx:

    403  Authorization mismatch (nothing read from the database)
    400  body is not {"event": {...}} or an event field has the wrong type or range
    200  applied, replayed, unknown user, missing user id, TEST / unknown type
    500  store failure while recording the event + entitlement change
"""

import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AuthenticationFailure, MalformedInput, ServiceError
from app.integrations.revenuecat_webhooks import verify_authorization
from app.models.premium_package import PremiumPackage
from app.models.user import User
from app.schemas.revenuecat import RevenueCatEvent, RevenueCatWebhookIn
from app.services.entitlement_sync import sync_event
from app.services.entitlements import GRANTING_EVENTS, EntitlementEvent, EventType
from app.services.idempotency import GuardResult
from app.utils.dt import from_epoch_ms, utcnow

logger = logging.getLogger(__name__)

MAX_USER_ID = 2**63 - 1


@dataclass(frozen=True)
class WebhookOutcome:
    status_code: int
    body: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, result: str, **extra: Any) -> "WebhookOutcome":
        return cls(200, {"message": "OK", "result": result, **extra})

    @classmethod
    def from_error(cls, error: ServiceError) -> "WebhookOutcome":
        return cls(error.http_status, {"message": error.message, "code": error.code})


def handle_webhook(
    db: Session,
    authorization: str | None,
    raw_body: bytes | str | None,
    *,
    secret: str | None = None,
    now: datetime | None = None,
) -> WebhookOutcome:
    try:
        _authenticate(authorization, settings.revenuecat_webhook_secret if secret is None else secret)
        event = _parse(raw_body)
    except (AuthenticationFailure, MalformedInput) as e:
        logger.warning("RevenueCat webhook rejected: %s", e.message, extra={"outcome": e.code})
        return WebhookOutcome.from_error(e)

    try:
        return _ingest(db, event, now or utcnow())
    except ServiceError as e:
        return WebhookOutcome.from_error(e)
    except Exception:
        db.rollback()
        logger.exception("RevenueCat webhook: unexpected failure", extra={"event_id": event.id})
        return WebhookOutcome(500, {"message": "Server Error", "code": "INTERNAL_ERROR"})


def _ingest(db: Session, event: RevenueCatEvent, now: datetime) -> WebhookOutcome:
    event_type = EventType.parse(event.type)

    if event.app_user_id is None or str(event.app_user_id).strip() == "":
        logger.warning("RevenueCat webhook: no app_user_id in event", extra={"event_type": event_type.value})
        return WebhookOutcome.ok("user_id_missing")

    user = _resolve_user(db, event.app_user_id)
    if user is None:
        # Not transient: failing would make RevenueCat retry forever
        logger.warning(
            "RevenueCat webhook: user not found",
            extra={"event_type": event_type.value, "user_id": str(event.app_user_id)},
        )
        return WebhookOutcome.ok("user_not_found")

    provider_event_id = event.id or _fingerprint(event)
    occurred_at = (
        from_epoch_ms(event.event_timestamp_ms)
        or from_epoch_ms(event.purchased_at_ms)
        or now
    )
    package_id = _resolve_package(db, event.product_id) if event_type in GRANTING_EVENTS else None

    result = sync_event(
        db,
        user_id=user.id,
        provider_event_id=provider_event_id,
        event=EntitlementEvent(
            type=event_type,
            occurred_at=occurred_at,
            package_id=package_id,
            expires_at=from_epoch_ms(event.expiration_at_ms),
        ),
    )

    if result.guard is GuardResult.ALREADY_APPLIED:
        return WebhookOutcome.ok("already_applied", event_id=provider_event_id)

    if event_type is EventType.UNKNOWN:
        logger.info("RevenueCat webhook: unhandled event type %s", event.type, extra={"user_id": user.id})

    return WebhookOutcome.ok(
        "applied" if result.changed else "no_change",
        event_id=provider_event_id,
        is_premium=result.state.is_premium,
    )


def _authenticate(authorization: str | None, secret: str) -> None:
    if not secret:
        logger.error("REVENUECAT_WEBHOOK_SECRET is not configured; rejecting delivery")
    if not verify_authorization(secret=secret, authorization=authorization):
        raise AuthenticationFailure("Unauthorized")


def _parse(raw_body: bytes | str | None) -> RevenueCatEvent:
    if not raw_body:
        raise MalformedInput("Invalid payload")
    try:
        payload = json.loads(raw_body)
    except ValueError:
        raise MalformedInput("Invalid payload") from None
    if not isinstance(payload, dict) or not isinstance(payload.get("event"), dict):
        raise MalformedInput("Invalid payload")
    try:
        return RevenueCatWebhookIn.model_validate(payload).event
    except ValidationError:
        raise MalformedInput("Invalid event fields") from None


def _resolve_user(db: Session, app_user_id: str | int) -> User | None:
    # RevenueCat anonymous ids ("$RCAnonymousID:...") never map to a user
    try:
        user_id = int(str(app_user_id).strip())
    except ValueError:
        return None
    # Ids beyond a BIGINT cannot exist and make the driver raise
    if not 0 < user_id <= MAX_USER_ID:
        return None
    return db.get(User, user_id)


def _resolve_package(db: Session, product_id: str | None) -> int | None:
    if not product_id:
        return None
    return db.scalar(select(PremiumPackage.id).where(PremiumPackage.store_product_id == product_id))


def _fingerprint(event: RevenueCatEvent) -> str:
    canonical = json.dumps(event.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(canonical.encode("utf-8")).hexdigest()
