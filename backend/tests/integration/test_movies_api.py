"""Integration tests for the /movies endpoints.

Total: 17 tests
"""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from catalog.models.permission import MOVIES_READ, MOVIES_WRITE
from tests.conftest import bearer, make_account

MOANA = {"title": "Moana", "year": 2016, "runtime": 107, "genres": ["animation", "adventure"]}


@pytest.fixture
async def writer(session_factory) -> dict[str, str]:
    account = await make_account(
        session_factory, email="writer@example.com", permissions=(MOVIES_READ, MOVIES_WRITE)
    )
    return bearer(account.token)


@pytest.fixture
async def reader(session_factory) -> dict[str, str]:
    account = await make_account(session_factory, email="reader@example.com", permissions=(MOVIES_READ,))
    return bearer(account.token)


async def _create(client: AsyncClient, headers: dict[str, str], body: dict | None = None) -> dict:
    response = await client.post("/api/v1/movies", json=body or MOANA, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["movie"]


@pytest.mark.asyncio
async def test_create_movie(client: AsyncClient, writer):
    response = await client.post("/api/v1/movies", json=MOANA, headers=writer)

    assert response.status_code == 201
    movie = response.json()["movie"]
    assert movie["title"] == "Moana"
    assert movie["version"] == 1
    assert response.headers["Location"] == f"/api/v1/movies/{movie['id']}"


@pytest.mark.asyncio
async def test_create_movie_reports_every_invalid_field(client: AsyncClient, writer):
    body = {"title": "", "year": 1500, "runtime": -1, "genres": ["drama", "drama"]}
    response = await client.post("/api/v1/movies", json=body, headers=writer)

    assert response.status_code == 422
    assert response.json()["error"]["fields"] == {
        "title": "must not be empty and less than 500 bytes",
        "year": "must be between 1888 and current year",
        "runtime": "must be a positive integer",
        "genres": "must not contain duplicate and empty values",
    }


@pytest.mark.asyncio
async def test_create_movie_rejects_wrong_types(client: AsyncClient, writer):
    body = {**MOANA, "runtime": "107 mins"}
    response = await client.post("/api/v1/movies", json=body, headers=writer)

    assert response.status_code == 422
    assert response.json()["error"]["fields"] == {"runtime": "must be an integer value"}


@pytest.mark.asyncio
async def test_create_movie_rejects_unknown_field(client: AsyncClient, writer):
    response = await client.post("/api/v1/movies", json={**MOANA, "rating": "PG"}, headers=writer)

    assert response.status_code == 422
    assert response.json()["error"]["fields"] == {"rating": "unknown field"}


@pytest.mark.asyncio
async def test_reader_cannot_create(client: AsyncClient, reader):
    response = await client.post("/api/v1/movies", json=MOANA, headers=reader)

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_show_movie(client: AsyncClient, writer, reader):
    created = await _create(client, writer)
    response = await client.get(f"/api/v1/movies/{created['id']}", headers=reader)

    assert response.status_code == 200
    assert response.json()["movie"] == created


@pytest.mark.asyncio
@pytest.mark.parametrize("movie_id", ["999", "0", "abc"])
async def test_show_missing_movie(client: AsyncClient, reader, movie_id):
    response = await client.get(f"/api/v1/movies/{movie_id}", headers=reader)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_partial_update(client: AsyncClient, writer):
    created = await _create(client, writer)
    response = await client.patch(
        f"/api/v1/movies/{created['id']}", json={"runtime": 108}, headers=writer
    )

    assert response.status_code == 200
    movie = response.json()["movie"]
    assert movie["runtime"] == 108
    assert movie["title"] == "Moana"
    assert movie["version"] == 2


@pytest.mark.asyncio
async def test_update_with_stale_expected_version(client: AsyncClient, writer):
    created = await _create(client, writer)
    await client.patch(f"/api/v1/movies/{created['id']}", json={"runtime": 108}, headers=writer)

    response = await client.patch(
        f"/api/v1/movies/{created['id']}",
        json={"runtime": 110},
        headers={**writer, "X-Expected-Version": "1"},
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "EDIT_CONFLICT"


@pytest.mark.asyncio
async def test_update_with_current_expected_version(client: AsyncClient, writer):
    created = await _create(client, writer)
    response = await client.patch(
        f"/api/v1/movies/{created['id']}",
        json={"year": 2017},
        headers={**writer, "X-Expected-Version": "1"},
    )

    assert response.status_code == 200
    assert response.json()["movie"]["year"] == 2017


@pytest.mark.asyncio
async def test_update_with_non_numeric_expected_version(client: AsyncClient, writer):
    created = await _create(client, writer)
    response = await client.patch(
        f"/api/v1/movies/{created['id']}",
        json={"year": 2017},
        headers={**writer, "X-Expected-Version": "abc"},
    )

    assert response.status_code == 422
    assert response.json()["error"]["fields"] == {"X-Expected-Version": "must be an integer value"}
    stored = await client.get(f"/api/v1/movies/{created['id']}", headers=writer)
    assert stored.json()["movie"]["version"] == 1


@pytest.mark.asyncio
async def test_delete_movie(client: AsyncClient, writer):
    created = await _create(client, writer)

    response = await client.delete(f"/api/v1/movies/{created['id']}", headers=writer)
    assert response.status_code == 200
    assert response.json() == {"message": "movie successfully deleted"}

    again = await client.delete(f"/api/v1/movies/{created['id']}", headers=writer)
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_list_movies_with_filters_and_metadata(client: AsyncClient, writer, reader):
    await _create(client, writer)
    await _create(client, writer, {"title": "Black Panther", "year": 2018, "runtime": 134, "genres": ["action", "adventure"]})
    await _create(client, writer, {"title": "Deadpool", "year": 2016, "runtime": 108, "genres": ["action", "comedy"]})

    response = await client.get(
        "/api/v1/movies",
        params={"genres": "adventure", "sort": "-year", "page_size": 1},
        headers=reader,
    )

    assert response.status_code == 200
    body = response.json()
    assert [m["title"] for m in body["movies"]] == ["Black Panther"]
    assert body["metadata"] == {
        "current_page": 1,
        "page_size": 1,
        "first_page": 1,
        "last_page": 2,
        "total_records": 2,
    }


@pytest.mark.asyncio
async def test_list_movies_rejects_bad_filters(client: AsyncClient, reader):
    response = await client.get(
        "/api/v1/movies", params={"page": 0, "page_size": 500, "sort": "rating"}, headers=reader
    )

    assert response.status_code == 422
    assert response.json()["error"]["fields"] == {
        "page": "must be between 1 and 10 million",
        "page_size": "must be between 1 and 100",
        "sort": "invalid sort value",
    }


@pytest.mark.asyncio
async def test_list_movies_empty(client: AsyncClient, reader):
    response = await client.get("/api/v1/movies", headers=reader)

    assert response.status_code == 200
    assert response.json() == {"movies": [], "metadata": {}}
