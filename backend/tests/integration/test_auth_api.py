"""Integration tests for bearer authentication and permission checks.

Total: 10 tests
"""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from catalog.models.permission import MOVIES_READ
from tests.conftest import bearer, make_account


@pytest.mark.asyncio
async def test_anonymous_request_needs_authentication(client: AsyncClient):
    response = await client.get("/api/v1/movies")

    assert response.status_code == 401
    assert response.json() == {
        "error": {
            "code": "AUTHENTICATION_REQUIRED",
            "message": "you must be authenticated to access this resource",
        }
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "header",
    [
        "Bearer",
        "Basic dXNlcjpwYXNz",
        "Bearer ABCDEFGHIJKLMNOPQRSTUVWXYZ extra",
        "Bearer too-short",
    ],
)
async def test_malformed_header_is_rejected(client: AsyncClient, header):
    response = await client.get("/api/v1/movies", headers={"Authorization": header})

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json()["error"]["message"] == "invalid or missing authentication token"


@pytest.mark.asyncio
async def test_unknown_token_is_rejected(client: AsyncClient):
    response = await client.get("/api/v1/movies", headers=bearer("A" * 26))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_malformed_header_rejected_on_open_endpoints(client: AsyncClient):
    response = await client.post(
        "/api/v1/tokens/activation",
        json={"email": "nobody@example.com"},
        headers={"Authorization": "Token abc"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_inactive_user_is_forbidden(client: AsyncClient, session_factory):
    account = await make_account(session_factory, activated=False, permissions=(MOVIES_READ,))
    response = await client.get("/api/v1/movies", headers=bearer(account.token))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "INACTIVE_ACCOUNT"


@pytest.mark.asyncio
async def test_user_without_permission_is_forbidden(client: AsyncClient, session_factory):
    account = await make_account(session_factory)
    response = await client.get("/api/v1/movies", headers=bearer(account.token))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_permitted_user_is_admitted(client: AsyncClient, session_factory):
    account = await make_account(session_factory, permissions=(MOVIES_READ,))
    response = await client.get("/api/v1/movies", headers=bearer(account.token))

    assert response.status_code == 200
