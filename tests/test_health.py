"""Health and metrics endpoint tests."""

from unittest.mock import AsyncMock

import pytest
import redis.asyncio as redis
from httpx import AsyncClient

from shortener.enums import HealthStatus
from shortener.main import app
from shortener.redis import get_redis


@pytest.mark.asyncio
async def test_health_check_cache_disabled(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == HealthStatus.HEALTHY.value
    assert data["database"] == HealthStatus.HEALTHY.value
    assert data["cache"] == HealthStatus.DISABLED.value


@pytest.mark.asyncio
async def test_health_check_with_cache(client: AsyncClient) -> None:
    mock_redis = AsyncMock(spec=redis.Redis)
    mock_redis.ping = AsyncMock(return_value=True)
    app.dependency_overrides[get_redis] = lambda: mock_redis

    response = await client.get("/health")
    data = response.json()
    assert data["status"] == HealthStatus.HEALTHY.value
    assert data["cache"] == HealthStatus.HEALTHY.value


@pytest.mark.asyncio
async def test_health_check_cache_down(client: AsyncClient) -> None:
    mock_redis = AsyncMock(spec=redis.Redis)
    mock_redis.ping = AsyncMock(side_effect=redis.ConnectionError("cache down"))
    app.dependency_overrides[get_redis] = lambda: mock_redis

    response = await client.get("/health")
    data = response.json()
    assert data["status"] == HealthStatus.UNHEALTHY.value
    assert data["database"] == HealthStatus.HEALTHY.value
    assert data["cache"] == HealthStatus.UNHEALTHY.value


@pytest.mark.asyncio
async def test_metrics_endpoint(client: AsyncClient) -> None:
    await client.post("/api/links", json={"url": "https://www.google.com"})

    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "link_shortener_create_requests_total" in response.text
