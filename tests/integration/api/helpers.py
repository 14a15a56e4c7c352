from httpx import AsyncClient


async def register(client: AsyncClient, user: dict):
    return await client.post(
        "/auth/register",
        json={
            "email": user["email"],
            "password": user["password"],
            "full_name": user["full_name"],
        },
    )


async def login(client: AsyncClient, user: dict, headers: dict = None):
    return await client.post(
        "/auth/login",
        json={"email": user["email"], "password": user["password"]},
        headers=headers or {},
    )


async def register_and_login(client: AsyncClient, user: dict, headers: dict = None) -> dict:
    await register(client, user)
    response = await login(client, user, headers)
    assert response.status_code == 200
    return response.json()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
