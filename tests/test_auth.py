"""Registration, login, token refresh and the /auth/me profile."""

from httpx import AsyncClient

from .conftest import RegisterMember, member_payload


async def test_register_returns_tokens(client: AsyncClient):
    response = await client.post("/api/auth/register", json=member_payload("newbie", utr=4.5))

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["data"]["access_token"]
    assert body["data"]["refresh_token"]
    member = body["data"]["member"]
    assert member["username"] == "newbie"
    assert member["utr"] == 4.5
    assert member["is_admin"] is False
    assert "password_hash" not in member


async def test_register_rejects_duplicates(client: AsyncClient, register: RegisterMember):
    await register("taken")

    same_email = await client.post(
        "/api/auth/register", json=member_payload("other", email="taken@example.com")
    )
    same_username = await client.post(
        "/api/auth/register", json=member_payload("taken", email="fresh@example.com")
    )

    assert same_email.status_code == 409
    assert same_username.status_code == 409


async def test_register_validates_fields(client: AsyncClient):
    bad_utr = await client.post("/api/auth/register", json=member_payload("rated", utr=17))
    bad_email = await client.post(
        "/api/auth/register", json=member_payload("mailer", email="not-an-email")
    )
    short_password = await client.post(
        "/api/auth/register", json=member_payload("shorty", password="123")
    )

    assert bad_utr.status_code == 422
    assert bad_email.status_code == 422
    assert short_password.status_code == 422
    assert bad_utr.json()["status"] == "error"


async def test_login(client: AsyncClient, register: RegisterMember):
    member = await register("player")

    ok = await client.post(
        "/api/auth/login", json={"email": member.email, "password": member.password}
    )
    wrong = await client.post(
        "/api/auth/login", json={"email": member.email, "password": "wrong-password"}
    )
    unknown = await client.post(
        "/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"}
    )

    assert ok.status_code == 200
    assert ok.json()["data"]["member"]["id"] == member.id
    assert wrong.status_code == 401
    assert unknown.status_code == 401


async def test_me_requires_valid_token(client: AsyncClient):
    missing = await client.get("/api/auth/me")
    garbage = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert missing.status_code == 401
    assert garbage.status_code == 401
    assert garbage.json()["message"] == "Invalid token"


async def test_update_me(client: AsyncClient, register: RegisterMember):
    member = await register("player")
    await register("rival")

    updated = await client.put(
        "/api/auth/me", json={"signature": "Serve and volley", "utr": 6.5}, headers=member.headers
    )
    clash = await client.put("/api/auth/me", json={"username": "rival"}, headers=member.headers)
    me = await client.get("/api/auth/me", headers=member.headers)

    assert updated.status_code == 200
    assert clash.status_code == 409
    assert me.json()["data"]["signature"] == "Serve and volley"
    assert me.json()["data"]["utr"] == 6.5
    assert me.json()["data"]["username"] == "player"


async def test_refresh_rotates_token(client: AsyncClient, register: RegisterMember):
    member = await register("player")

    refreshed = await client.post(
        "/api/auth/refresh", json={"refresh_token": member.refresh_token}
    )
    reused = await client.post("/api/auth/refresh", json={"refresh_token": member.refresh_token})

    assert refreshed.status_code == 200
    tokens = refreshed.json()["data"]
    assert tokens["refresh_token"] != member.refresh_token
    assert reused.status_code == 401

    me = await client.get(
        "/api/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"}
    )
    assert me.json()["data"]["id"] == member.id


async def test_logout_revokes_refresh_token(client: AsyncClient, register: RegisterMember):
    member = await register("player")

    logout = await client.post("/api/auth/logout", json={"refresh_token": member.refresh_token})
    refresh = await client.post("/api/auth/refresh", json={"refresh_token": member.refresh_token})

    assert logout.status_code == 200
    assert refresh.status_code == 401
