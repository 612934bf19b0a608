"""POST /revenuecat/webhook over HTTP."""

from sqlalchemy import func, select

from app.models import AppliedEvent
from app.services.entitlement_sync import load_state

FUTURE_MS = 1893456000000  # 2030-01-01 UTC


def test_rejects_unauthorized_requests(client):
    res = client.post("/revenuecat/webhook", json={"event": {"type": "TEST"}})
    assert res.status_code == 403
    assert res.json()["message"] == "Unauthorized"


def test_malformed_payload_is_400(client, webhook_secret):
    headers = {"Authorization": webhook_secret}
    assert client.post("/revenuecat/webhook", json={"nope": 1}, headers=headers).status_code == 400
    res = client.post(
        "/revenuecat/webhook", content=b"{oops", headers={**headers, "Content-Type": "application/json"},
    )
    assert res.status_code == 400


def test_initial_purchase_activates_premium(client, db, make_user, webhook_secret):
    user = make_user()
    res = client.post(
        "/revenuecat/webhook",
        json={"event": {
            "id": "evt_1",
            "type": "INITIAL_PURCHASE",
            "app_user_id": str(user.id),
            "expiration_at_ms": FUTURE_MS,
        }},
        headers={"Authorization": webhook_secret},
    )
    assert res.status_code == 200
    assert res.json()["result"] == "applied"
    state, _ = load_state(db, user.id)
    assert state.is_premium
    assert state.premium_until is not None


def test_expiration_deactivates_premium(client, db, make_user, webhook_secret):
    user = make_user()
    headers = {"Authorization": webhook_secret}
    client.post("/revenuecat/webhook", headers=headers, json={"event": {
        "id": "p", "type": "INITIAL_PURCHASE", "app_user_id": user.id, "expiration_at_ms": FUTURE_MS,
    }})
    res = client.post("/revenuecat/webhook", headers=headers, json={"event": {
        "id": "x", "type": "EXPIRATION", "app_user_id": user.id,
    }})
    assert res.status_code == 200
    assert not load_state(db, user.id)[0].is_premium


def test_unknown_user_and_replays_return_200(client, db, make_user, webhook_secret):
    headers = {"Authorization": webhook_secret}
    res = client.post("/revenuecat/webhook", headers=headers, json={"event": {"type": "RENEWAL", "app_user_id": "123456"}})
    assert res.status_code == 200
    assert res.json()["result"] == "user_not_found"

    user = make_user()
    payload = {"event": {"id": "dup", "type": "RENEWAL", "app_user_id": str(user.id), "expiration_at_ms": FUTURE_MS}}
    assert client.post("/revenuecat/webhook", headers=headers, json=payload).json()["result"] == "applied"
    assert client.post("/revenuecat/webhook", headers=headers, json=payload).json()["result"] == "already_applied"
    assert db.scalar(select(func.count()).select_from(AppliedEvent)) == 1


def test_oversized_user_id_and_far_future_expiry_over_http(client, webhook_secret):
    headers = {"Authorization": webhook_secret}
    res = client.post(
        "/revenuecat/webhook",
        json={"event": {"id": "big-id", "type": "INITIAL_PURCHASE", "app_user_id": "9" * 30}},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json()["result"] == "user_not_found"

    res = client.post(
        "/revenuecat/webhook",
        json={"event": {"id": "far", "type": "RENEWAL", "app_user_id": "1", "expiration_at_ms": 10**18}},
        headers=headers,
    )
    assert res.status_code == 400
