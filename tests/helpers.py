"""HTTP helpers shared by the API tests."""

from __future__ import annotations

import httpx

API = "/api"


async def register(client: httpx.AsyncClient, name: str, email: str, password: str = "secret123") -> httpx.Response:
    return await client.post(
        f"{API}/auth/register",
        json={
            "name": name,
            "email": email,
            "password": password,
            "confirmPassword": password,
        },
    )


async def login_token(client: httpx.AsyncClient, email: str, password: str = "secret123") -> str:
    """Log in and return the token; the cookie jar is cleared afterwards."""
    resp = await client.post(f"{API}/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    client.cookies.clear()
    return resp.json()["data"]["token"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
