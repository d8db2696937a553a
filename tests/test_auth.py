from datetime import datetime, timedelta, timezone

import httpx
import jwt
import pytest

from eventbook.config import Settings
from eventbook.main import create_app

from conftest import ADMIN_HEADERS, JWT_SECRET


async def _login(client, username="admin", password="s3cret"):
    return await client.post("/api/auth/login", json={"username": username, "password": password})


async def test_login_issues_admin_token(client):
    r = await _login(client)

    assert r.status_code == 200
    body = r.json()
    assert body["username"] == "admin"
    assert body["role"] == "admin"
    claims = jwt.decode(body["token"], JWT_SECRET, algorithms=["HS256"])
    assert claims["role"] == "admin"


async def test_login_rejects_bad_password(client):
    r = await _login(client, password="guess")
    assert r.status_code == 401
    assert r.json()["error"] == "invalid_credentials"


async def test_bearer_token_grants_admin(client):
    token = (await _login(client)).json()["token"]
    headers = {"Authorization": f"Bearer {token}"}

    assert (await client.get("/api/bookings", headers=headers)).status_code == 200

    verified = await client.post("/api/auth/verify", headers=headers)
    assert verified.status_code == 200
    assert verified.json()["valid"] is True
    assert verified.json()["user"]["username"] == "admin"


@pytest.mark.parametrize(
    "claims, secret",
    [
        ({"username": "admin", "role": "admin"}, "some-other-secret-also-32-bytes-long!"),
        ({"username": "mallory", "role": "viewer"}, JWT_SECRET),
        ({"username": "admin", "role": "admin",
          "exp": datetime.now(timezone.utc) - timedelta(minutes=5)}, JWT_SECRET),
    ],
)
async def test_bad_tokens_are_refused(client, claims, secret):
    token = jwt.encode(claims, secret, algorithm="HS256")
    r = await client.get("/api/bookings", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


async def test_verify_without_token(client):
    r = await client.post("/api/auth/verify")
    assert r.status_code == 401
    r = await client.post("/api/auth/verify", headers={"Authorization": "Bearer junk"})
    assert r.status_code == 401


async def test_admin_key_header(client):
    assert (await client.get("/api/bookings", headers=ADMIN_HEADERS)).status_code == 200


async def test_nothing_configured_fails_closed(database):
    app = create_app(Settings(database_url=str(database.url)), database=database)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        assert (await client.get("/api/bookings")).status_code == 401
        assert (await client.get("/api/bookings", headers={"X-Admin-Key": ""})).status_code == 401
        login = await _login(client)
        assert login.status_code == 503
        assert login.json()["error"] == "auth_not_configured"
