def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def test_me_returns_token_claims(client, registered_user):
    response = await client.get("/auth/me", headers=bearer(registered_user["access_token"]))

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["user_id"] == registered_user["user"].id
    assert user["email"] == "alice@example.com"


async def test_me_without_token(client):
    client.cookies.clear()
    response = await client.get("/auth/me")
    assert response.status_code == 401


async def test_me_accepts_access_cookie(client, registered_user):
    client.cookies.clear()
    client.cookies.set("access_token", registered_user["access_token"])
    response = await client.get("/auth/me")
    assert response.status_code == 200


async def test_profile(client, registered_user):
    response = await client.get("/auth/profile", headers=bearer(registered_user["access_token"]))

    assert response.status_code == 200
    assert response.json() == registered_user["user"].public()


async def test_admin_can_force_sign_out(client, registered_user, admin_user):
    user_id = registered_user["user"].id

    response = await client.post(
        f"/auth/users/{user_id}/revoke-sessions",
        headers=bearer(admin_user["access_token"])
    )
    assert response.status_code == 200

    response = await client.post("/auth/refresh", json={"refresh_token": registered_user["refresh_token"]})
    assert response.status_code == 401


async def test_customer_cannot_force_sign_out(client, registered_user, admin_user):
    response = await client.post(
        f"/auth/users/{admin_user['user'].id}/revoke-sessions",
        headers=bearer(registered_user["access_token"])
    )
    assert response.status_code == 403

    response = await client.post("/auth/refresh", json={"refresh_token": admin_user["refresh_token"]})
    assert response.status_code == 200


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert "x-request-id" in response.headers
