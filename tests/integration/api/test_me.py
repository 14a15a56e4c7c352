import pytest
from httpx import AsyncClient

from tests.integration.api.helpers import bearer, register_and_login


@pytest.mark.asyncio
async def test_me_returns_identity(client: AsyncClient, test_data):
    user = test_data.user("alice")
    tokens = await register_and_login(client, user)

    response = await client.get("/auth/me", headers=bearer(tokens["access_token"]))

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == user["email"]
    assert data["full_name"] == user["full_name"]
    assert data["roles"] == ["USER"]
    assert data["status"] == "active"
    assert data["session_id"] == tokens["session_id"]


@pytest.mark.asyncio
async def test_me_without_credential(client: AsyncClient):
    response = await client.get("/auth/me")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "MISSING_CREDENTIAL"


@pytest.mark.asyncio
async def test_me_with_refresh_token(client: AsyncClient, test_data):
    tokens = await register_and_login(client, test_data.user("alice"))

    response = await client.get("/auth/me", headers=bearer(tokens["refresh_token"]))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CREDENTIAL"


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
