"""Redirect resolver outcome tests."""

import datetime
from unittest.mock import AsyncMock

import pytest

from shortener.enums import ResolveStatus
from shortener.exceptions import StorageError
from shortener.models import Link
from shortener.redirect import RedirectResolver


@pytest.mark.asyncio
async def test_resolve_unknown_hash(store, clock) -> None:
    resolver = RedirectResolver(store, clock=clock)

    resolution = await resolver.resolve("zzzz")

    assert resolution.status is ResolveStatus.NOT_FOUND
    assert resolution.link is None
    assert resolution.target_url is None


@pytest.mark.asyncio
async def test_resolve_malformed_hash_skips_store(clock) -> None:
    finder = AsyncMock()
    resolver = RedirectResolver(finder, clock=clock)

    resolution = await resolver.resolve("nonexistent-hash")

    assert resolution.status is ResolveStatus.NOT_FOUND
    finder.find_by_hash.assert_not_awaited()


@pytest.mark.asyncio
async def test_resolve_active_link(store, clock) -> None:
    link = await store.create("https://example.com/page")
    resolver = RedirectResolver(store, clock=clock)

    resolution = await resolver.resolve(link.hash)

    assert resolution.ok
    assert resolution.target_url == "https://example.com/page"
    assert resolution.resolved_at == clock.now


@pytest.mark.asyncio
async def test_resolve_immediately_after_create(store) -> None:
    link = await store.create("https://example.com", datetime.datetime.now(datetime.UTC) + datetime.timedelta(days=1))
    resolver = RedirectResolver(store)

    assert (await resolver.resolve(link.hash)).target_url == "https://example.com"


@pytest.mark.asyncio
async def test_link_is_active_at_exact_expiration(store, clock) -> None:
    link = await store.create("https://example.com", clock.now)
    resolver = RedirectResolver(store, clock=clock)

    assert (await resolver.resolve(link.hash)).status is ResolveStatus.OK


@pytest.mark.asyncio
async def test_link_expires_just_after_expiration(store, clock) -> None:
    link = await store.create("https://example.com", clock.now)
    resolver = RedirectResolver(store, clock=clock)
    clock.advance(microseconds=1)

    resolution = await resolver.resolve(link.hash)

    assert resolution.status is ResolveStatus.EXPIRED
    assert resolution.target_url is None
    assert resolution.link.url == "https://example.com"


@pytest.mark.asyncio
async def test_expiration_is_one_way(store, clock) -> None:
    link = await store.create("https://example.com", clock.now + datetime.timedelta(minutes=5))
    resolver = RedirectResolver(store, clock=clock)

    assert (await resolver.resolve(link.hash)).status is ResolveStatus.OK
    clock.advance(minutes=10)
    assert (await resolver.resolve(link.hash)).status is ResolveStatus.EXPIRED
    clock.advance(days=365)
    assert (await resolver.resolve(link.hash)).status is ResolveStatus.EXPIRED


@pytest.mark.asyncio
async def test_expired_and_unknown_are_distinct(store, clock) -> None:
    link = await store.create("https://example.com", clock.now - datetime.timedelta(seconds=1))
    resolver = RedirectResolver(store, clock=clock)

    expired = await resolver.resolve(link.hash)
    missing = await resolver.resolve("zzzz")

    assert expired.status is ResolveStatus.EXPIRED
    assert missing.status is ResolveStatus.NOT_FOUND


@pytest.mark.asyncio
async def test_link_without_expiration_never_expires(store, clock) -> None:
    link = await store.create("https://example.com")
    resolver = RedirectResolver(store, clock=clock)
    clock.advance(days=365 * 100)

    assert (await resolver.resolve(link.hash)).ok


@pytest.mark.asyncio
async def test_clock_is_read_once_per_resolution(clock) -> None:
    finder = AsyncMock()
    finder.find_by_hash.return_value = Link(
        id=1, hash="1", url="https://example.com", expires_at=clock.now, created_at=clock.now
    )
    resolver = RedirectResolver(finder, clock=clock)

    await resolver.resolve("1")

    assert clock.reads == 1


@pytest.mark.asyncio
async def test_naive_expiration_is_treated_as_utc(clock) -> None:
    finder = AsyncMock()
    finder.find_by_hash.return_value = Link(
        id=1,
        hash="1",
        url="https://example.com",
        expires_at=(clock.now - datetime.timedelta(seconds=1)).replace(tzinfo=None),
        created_at=clock.now,
    )
    resolver = RedirectResolver(finder, clock=clock)

    assert (await resolver.resolve("1")).status is ResolveStatus.EXPIRED


@pytest.mark.asyncio
async def test_storage_error_propagates(clock) -> None:
    finder = AsyncMock()
    finder.find_by_hash.side_effect = StorageError("connection lost")
    resolver = RedirectResolver(finder, clock=clock)

    with pytest.raises(StorageError):
        await resolver.resolve("abc")
