# tests/test_auth/test_auth_api.py

import pytest

from app.utils.exceptions import RateLimitedError

pytestmark = pytest.mark.anyio


@pytest.fixture(autouse=True)
def rate_limit_calls(monkeypatch):
    """No Redis in tests: record rate-limit calls instead."""
    calls = {"checked": [], "reset": []}

    async def _check(key, max_attempts, window_seconds):
        calls["checked"].append(key)

    async def _reset(key):
        calls["reset"].append(key)

    monkeypatch.setattr("app.routers.auth.check_rate_limit", _check)
    monkeypatch.setattr("app.routers.auth.reset_rate_limit", _reset)
    return calls


async def _signup(client, email="diner@reviews.dev", password="s3cret-pass", name="Diner"):
    return await client.post("/auth/signup", json={"email": email, "password": password, "name": name})


async def test_signup_returns_tokens_and_user(client):
    resp = await _signup(client)

    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "User created successfully"
    assert body["token_type"] == "bearer"
    assert body["access_token"] and body["refresh_token"]
    assert body["expires_in"] == 3600
    assert body["user"]["email"] == "diner@reviews.dev"
    assert body["user"]["role"] == "user"


async def test_signup_duplicate_email_conflicts(client):
    await _signup(client)
    resp = await _signup(client)

    assert resp.status_code == 409
    assert resp.json()["error_code"] == "CONFLICT"


async def test_signup_validates_email(client):
    resp = await _signup(client, email="not-an-email")

    assert resp.status_code == 400
    assert "email" in resp.json()["details"]


async def test_login_success(client, rate_limit_calls):
    await _signup(client)

    resp = await client.post("/auth/login", data={"username": "diner@reviews.dev", "password": "s3cret-pass"})

    assert resp.status_code == 200
    assert resp.json()["message"] == "Authentication successful"
    assert rate_limit_calls["checked"] == ["login:diner@reviews.dev"]
    assert rate_limit_calls["reset"] == ["login:diner@reviews.dev"]


async def test_login_wrong_password(client, rate_limit_calls):
    await _signup(client)

    resp = await client.post("/auth/login", data={"username": "diner@reviews.dev", "password": "wrong"})

    assert resp.status_code == 401
    assert rate_limit_calls["reset"] == []


async def test_login_rate_limited(client, monkeypatch):
    async def _limited(key, max_attempts, window_seconds):
        raise RateLimitedError()

    monkeypatch.setattr("app.routers.auth.check_rate_limit", _limited)

    resp = await client.post("/auth/login", data={"username": "diner@reviews.dev", "password": "x"})

    assert resp.status_code == 429
    assert resp.json()["error_code"] == "RATE_LIMITED"


async def test_token_from_signup_creates_reviews(client):
    token = (await _signup(client)).json()["access_token"]

    resp = await client.post(
        "/reviews",
        json={
            "restaurantName": "Bistro Azul",
            "address": "Avenida Central, 9",
            "city": "Lisboa",
            "ratings": {"food": 4, "service": 4, "environment": 3},
            "price": 2,
            "comment": "Solid lunch spot near the station.",
        },
        headers={"Authorization": f"Bearer {token}"},
    )

    assert resp.status_code == 201


async def test_refresh_issues_new_pair(client):
    refresh_token = (await _signup(client)).json()["refresh_token"]

    resp = await client.post("/auth/refresh", json={"refresh_token": refresh_token})

    assert resp.status_code == 200
    assert resp.json()["access_token"]


async def test_refresh_rejects_access_token(client):
    access_token = (await _signup(client)).json()["access_token"]

    resp = await client.post("/auth/refresh", json={"refresh_token": access_token})

    assert resp.status_code == 401
    assert resp.json()["error_code"] == "INVALID_TOKEN"


async def test_verify_token(client):
    signup = (await _signup(client)).json()

    resp = await client.post("/auth/verify", json={"id_token": signup["access_token"]})

    assert resp.json() == {"uid": signup["user"]["uid"], "email": "diner@reviews.dev", "verified": True}


async def test_me(client):
    signup = (await _signup(client)).json()

    resp = await client.get("/auth/me", headers={"Authorization": f"Bearer {signup['access_token']}"})

    assert resp.status_code == 200
    assert resp.json()["uid"] == signup["user"]["uid"]


async def test_role_update_requires_users_manage_scope(client, auth_headers):
    uid = (await _signup(client)).json()["user"]["uid"]

    denied = await client.patch(f"/users/{uid}/role", json={"role": "admin"}, headers=auth_headers("someone"))
    granted = await client.patch(f"/users/{uid}/role", json={"role": "admin"}, headers=auth_headers("root", role="admin"))

    assert denied.status_code == 403
    assert granted.status_code == 200
    assert granted.json()["role"] == "admin"


async def test_promoted_role_applies_after_refresh(client, auth_headers):
    signup = (await _signup(client)).json()
    uid = signup["user"]["uid"]
    await client.patch(f"/users/{uid}/role", json={"role": "admin"}, headers=auth_headers("root", role="admin"))

    refreshed = await client.post("/auth/refresh", json={"refresh_token": signup["refresh_token"]})
    verified = await client.post("/auth/verify", json={"id_token": refreshed.json()["access_token"]})

    assert verified.status_code == 200
    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {refreshed.json()['access_token']}"})
    assert me.json()["role"] == "admin"
