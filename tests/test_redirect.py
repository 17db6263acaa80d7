"""Redirect and link lookup endpoint behavior tests."""

import pytest
from httpx import AsyncClient


async def _shorten(client: AsyncClient, url: str, **extra) -> str:
    response = await client.post("/api/links", json={"url": url, **extra})
    assert response.status_code == 201
    return response.json()["hash"]


@pytest.mark.asyncio
async def test_redirect_valid_hash(client: AsyncClient) -> None:
    hash = await _shorten(client, "https://www.google.com")

    # httpx won't follow by default
    response = await client.get(f"/{hash}", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "https://www.google.com"


@pytest.mark.asyncio
async def test_redirect_preserves_query_string_in_target(client: AsyncClient) -> None:
    hash = await _shorten(client, "https://example.com/search?q=python&page=2")

    response = await client.get(f"/{hash}", follow_redirects=False)
    assert response.headers["location"] == "https://example.com/search?q=python&page=2"


@pytest.mark.asyncio
async def test_redirect_unknown_hash(client: AsyncClient) -> None:
    response = await client.get("/zzzz", follow_redirects=False)
    assert response.status_code == 404
    assert response.json() == {"error": "Link not found"}


@pytest.mark.asyncio
async def test_redirect_malformed_hash(client: AsyncClient) -> None:
    response = await client.get("/nonexistent-hash", follow_redirects=False)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_redirect_is_case_sensitive(client: AsyncClient) -> None:
    for index in range(10):
        await _shorten(client, f"https://example.com/{index}")

    assert (await client.get("/a", follow_redirects=False)).status_code == 307
    assert (await client.get("/A", follow_redirects=False)).status_code == 404


@pytest.mark.asyncio
async def test_redirect_expired_link(client: AsyncClient) -> None:
    hash = await _shorten(client, "https://www.python.org", expires_at="2000-01-01T00:00:00Z")

    response = await client.get(f"/{hash}", follow_redirects=False)
    assert response.status_code == 410
    assert response.json() == {"error": "Link has expired"}


@pytest.mark.asyncio
async def test_redirect_link_with_future_expiration(client: AsyncClient) -> None:
    hash = await _shorten(client, "https://www.python.org", expires_in=3600)

    response = await client.get(f"/{hash}", follow_redirects=False)
    assert response.status_code == 307


@pytest.mark.asyncio
async def test_get_link_details(client: AsyncClient) -> None:
    hash = await _shorten(client, "https://www.github.com")

    response = await client.get(f"/api/links/{hash}")
    assert response.status_code == 200
    data = response.json()
    assert data["hash"] == hash
    assert data["url"] == "https://www.github.com"
    assert data["expired"] is False


@pytest.mark.asyncio
async def test_get_link_details_expired(client: AsyncClient) -> None:
    hash = await _shorten(client, "https://www.github.com", expires_at="2000-01-01T00:00:00Z")

    response = await client.get(f"/api/links/{hash}")
    assert response.status_code == 200
    data = response.json()
    assert data["expired"] is True
    assert data["expires_at"].startswith("2000-01-01T00:00:00")


@pytest.mark.asyncio
async def test_get_link_details_not_found(client: AsyncClient) -> None:
    response = await client.get("/api/links/zzzz")
    assert response.status_code == 404
    assert response.json() == {"error": "Link not found"}
