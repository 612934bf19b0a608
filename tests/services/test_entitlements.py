"""Entitlement state machine: pure transition rules, no database."""

from datetime import datetime, timedelta, timezone

import pytest

from app.services.entitlements import (
    FREE,
    EntitlementEvent,
    EntitlementState,
    EntitlementStatus,
    EventType,
    apply,
    is_entitled,
)

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _event(type_, at=T0, expires=None, package_id=None):
    return EntitlementEvent(type=type_, occurred_at=at, package_id=package_id, expires_at=expires)


def _active(until=T0 + timedelta(days=30), last=T0, package_id=1):
    return EntitlementState(EntitlementStatus.ACTIVE, package_id, until, last)


@pytest.mark.parametrize("type_", [
    EventType.INITIAL_PURCHASE, EventType.RENEWAL, EventType.NON_RENEWING_PURCHASE,
])
def test_granting_events_activate_free_user(type_):
    until = T0 + timedelta(days=30)
    t = apply(FREE, _event(type_, expires=until, package_id=2))
    assert t.applied
    assert t.state.is_premium
    assert t.state.premium_until == until
    assert t.state.package_id == 2
    assert t.state.last_event_at == T0


def test_purchase_without_expiration_is_lifetime():
    t = apply(FREE, _event(EventType.NON_RENEWING_PURCHASE, expires=None))
    assert t.state.is_premium
    assert t.state.premium_until is None


def test_renewal_extends_active_period():
    state = _active()
    new_until = T0 + timedelta(days=60)
    t = apply(state, _event(EventType.RENEWAL, at=T0 + timedelta(days=29), expires=new_until))
    assert t.applied
    assert t.state.premium_until == new_until


def test_event_older_than_last_applied_is_ignored():
    state = _active(last=T0 + timedelta(days=5))
    t = apply(state, _event(EventType.RENEWAL, at=T0, expires=T0 + timedelta(days=90)))
    assert not t.applied
    assert t.state == state


def test_later_arriving_event_with_earlier_expiration_does_not_regress():
    t1 = T0 + timedelta(days=30)
    t2 = T0 + timedelta(days=60)
    after_t2 = apply(FREE, _event(EventType.RENEWAL, at=T0, expires=t2)).state
    # Same event time, earlier expiration: stale
    t = apply(after_t2, _event(EventType.INITIAL_PURCHASE, at=T0, expires=t1))
    assert not t.applied
    assert t.state.premium_until == t2


def test_finite_purchase_does_not_cut_lifetime_access():
    lifetime = apply(FREE, _event(EventType.NON_RENEWING_PURCHASE, expires=None)).state
    t = apply(lifetime, _event(EventType.RENEWAL, at=T0 + timedelta(days=1), expires=T0 + timedelta(days=31)))
    assert not t.applied
    assert t.state.premium_until is None


def test_purchase_whose_period_already_ended_grants_nothing():
    t = apply(FREE, _event(EventType.INITIAL_PURCHASE, at=T0, expires=T0 - timedelta(days=1)))
    assert not t.applied
    assert not t.state.is_premium


def test_expiration_revokes_active():
    t = apply(_active(), _event(EventType.EXPIRATION, at=T0 + timedelta(days=30)))
    assert t.applied
    assert t.state.status is EntitlementStatus.EXPIRED
    assert not t.state.is_premium
    assert t.state.premium_until is None
    assert t.state.package_id is None


def test_expiration_is_unconditional_even_when_older():
    state = _active(last=T0 + timedelta(days=10))
    t = apply(state, _event(EventType.EXPIRATION, at=T0))
    assert not t.state.is_premium
    # last_event_at never moves backwards
    assert t.state.last_event_at == T0 + timedelta(days=10)


def test_cancellation_never_changes_premium():
    state = _active()
    t = apply(state, _event(EventType.CANCELLATION, at=T0 + timedelta(days=3)))
    assert not t.applied
    assert t.state is state
    assert t.state.is_premium


def test_expiration_wins_over_surrounding_cancellations():
    state = _active()
    for ev in (
        _event(EventType.CANCELLATION, at=T0 + timedelta(days=1)),
        _event(EventType.EXPIRATION, at=T0 + timedelta(days=30)),
        _event(EventType.CANCELLATION, at=T0 + timedelta(days=2)),
    ):
        state = apply(state, ev).state
    assert not state.is_premium


def test_stale_purchase_after_expiration_does_not_reactivate():
    expired = apply(_active(), _event(EventType.EXPIRATION, at=T0 + timedelta(days=30))).state
    t = apply(expired, _event(EventType.RENEWAL, at=T0 + timedelta(days=1), expires=T0 + timedelta(days=90)))
    assert not t.applied
    assert not t.state.is_premium


def test_new_cycle_after_expiration_reactivates():
    expired = apply(_active(), _event(EventType.EXPIRATION, at=T0 + timedelta(days=30))).state
    t = apply(expired, _event(EventType.INITIAL_PURCHASE, at=T0 + timedelta(days=40), expires=T0 + timedelta(days=70)))
    assert t.applied
    assert t.state.is_premium


@pytest.mark.parametrize("type_", [EventType.TEST, EventType.UNKNOWN])
def test_test_and_unknown_events_change_nothing(type_):
    state = _active()
    t = apply(state, _event(type_))
    assert not t.applied
    assert t.state == state


@pytest.mark.parametrize("raw,expected", [
    ("RENEWAL", EventType.RENEWAL),
    ("renewal", EventType.RENEWAL),
    ("PRODUCT_CHANGE", EventType.UNKNOWN),
    ("", EventType.UNKNOWN),
    (None, EventType.UNKNOWN),
])
def test_event_type_parse(raw, expected):
    assert EventType.parse(raw) is expected


def test_is_entitled_respects_until():
    state = _active(until=T0 + timedelta(days=30))
    assert is_entitled(state, T0 + timedelta(days=29))
    assert not is_entitled(state, T0 + timedelta(days=31))
    assert not is_entitled(FREE, T0)
    assert is_entitled(_active(until=None), T0 + timedelta(days=10_000))
