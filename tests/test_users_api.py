import uuid

from sqlalchemy import func, select

from holdaspot.core.config import settings
from holdaspot.models import CreditLedger, CreditReason


async def test_signup_creates_user_with_initial_grant(client, db):
    response = await client.post("/api/users", json={"email": "  New.Player@Example.COM "})
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["email"] == "new.player@example.com"
    assert user["bonus_credits"] == 0
    assert user["is_admin"] is False

    entries = (await db.execute(select(CreditLedger))).scalars().all()
    assert len(entries) == 1
    assert entries[0].transaction_type == CreditReason.WEEKLY_RESET
    assert entries[0].amount == 10
    assert entries[0].bonus_delta == 0


async def test_signup_returns_existing_user(client):
    first = await client.post("/api/users", json={"email": "player@example.com"})
    second = await client.post("/api/users", json={"email": "PLAYER@example.com"})
    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["user"]["id"] == first.json()["user"]["id"]


async def test_signup_rejects_bad_email(client):
    response = await client.post("/api/users", json={"email": "not-an-email"})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid email format"

    response = await client.post("/api/users", json={"email": "   "})
    assert response.status_code == 400
    assert response.json()["error"] == "Email is required"

    response = await client.post("/api/users", json={})
    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields: email"


async def test_get_user(client, user):
    response = await client.get(f"/api/users/{user.id}")
    assert response.status_code == 200
    assert response.json()["email"] == "player@example.com"

    response = await client.get(f"/api/users/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json() == {"error": "User not found", "code": "not_found"}

    response = await client.get("/api/users/abc")
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid user ID format"


async def test_fresh_user_credits(client, user):
    response = await client.get(f"/api/users/{user.id}/credits")
    assert response.status_code == 200
    body = response.json()
    assert body["weekly_allowance"] == 10
    assert body["used_this_week"] == 0
    assert body["weekly_remaining"] == 10
    assert body["bonus_credits"] == 0
    assert body["total_available"] == 10
    assert len(body["transactions"]) == 1
    assert body["transactions"][0]["transaction_type"] == "weekly_reset"


async def test_credits_rejects_bad_week_start(client, user):
    response = await client.get(f"/api/users/{user.id}/credits", params={"week_start": "next tuesday"})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid week_start format"


async def test_admin_bonus_adjustment(client, db, user, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_SECRET", "admin-token")
    url = f"/api/users/{user.id}/bonus-credits"
    headers = {"Authorization": "Bearer admin-token"}

    response = await client.post(url, json={"amount": 5, "notes": "League winner"}, headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["bonus_credits"] == 5
    assert body["entry"]["transaction_type"] == "admin_adjustment"
    assert body["entry"]["bonus_delta"] == 5

    response = await client.post(url, json={"amount": -10}, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Bonus credits cannot go below zero"

    response = await client.post(url, json={"amount": 0}, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Amount must not be zero"

    await db.refresh(user)
    assert user.bonus_credits == 5
    total_delta = await db.scalar(
        select(func.sum(CreditLedger.bonus_delta)).where(CreditLedger.user_id == user.id)
    )
    assert total_delta == user.bonus_credits


async def test_admin_bonus_adjustment_requires_token(client, user, monkeypatch):
    url = f"/api/users/{user.id}/bonus-credits"

    monkeypatch.setattr(settings, "ADMIN_SECRET", "")
    response = await client.post(url, json={"amount": 5})
    assert response.status_code == 500
    assert response.json()["error"] == "Server configuration error"

    monkeypatch.setattr(settings, "ADMIN_SECRET", "admin-token")
    response = await client.post(url, json={"amount": 5}, headers={"Authorization": "Bearer wrong"})
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"
