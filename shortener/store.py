"""Link store: persists links and looks them up by hash.

The store owns every interaction with PostgreSQL (through an async SQLAlchemy
session) and the optional Redis lookup cache. It never evaluates expiration;
``find_by_hash`` returns the raw record so that the expiration policy lives in
``shortener.redirect`` only.

Flow Diagram — create()
=======================
::
    ┌─────────────┐
    │ create(url, │
    │ expires_at) │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Normalize & │──── invalid ──► InvalidTarget
    │ validate URL│
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Collision   │  allocate_key() ─► UPDATE link_keys ... RETURNING
    │ Resolver    │  reserve()      ─► INSERT links (insert-or-fail)
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Cache link  │
    │ (best effort│
    └──────┬──────┘
           ▼
       return Link

Flow Diagram — find_by_hash()
=============================
::
    ┌─────────────┐
    │ Redis GET   │── HIT ──► Link
    └──────┬──────┘
           ▼ MISS / cache down
    ┌─────────────┐
    │ SELECT by   │── none ──► None
    │ hash        │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Cache result│
    └──────┬──────┘
           ▼
         Link

Key Behaviours
===============
- Keys come from a persisted counter row incremented atomically in the
  database; key allocation commits on its own so a rejected insert can leave a
  gap but never reuses a key.
- Inserts are atomic: a uniqueness violation rolls the whole row back.
- A committed link is immediately visible to ``find_by_hash`` from any session.
- Only known hashes are cached, so cached entries are never contradicted.
- Database failures surface as ``StorageError``; they are not retried here.
- Cache failures are logged and the database is used instead.
"""

import datetime
import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import redis.asyncio as redis
from pydantic import ValidationError
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.clock import Clock, as_utc, utcnow
from shortener.collision import CollisionResolver
from shortener.config import Settings, get_settings
from shortener.exceptions import StorageError
from shortener.metrics import CACHE_REQUESTS_TOTAL
from shortener.models import Link, LinkKey
from shortener.schemas import CachedLinkPayload
from shortener.validation import normalize_target_url

__all__ = ["LinkStore", "handle_storage_errors"]

CACHE_KEY_PREFIX = "link"

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def handle_storage_errors(method: F) -> F:
    """Wrap store methods so database failures raise StorageError.

    Uniqueness violations are handled inside the wrapped methods and never
    reach this wrapper.
    """

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except (SQLAlchemyError, OSError) as exc:
            raise StorageError(f"Data store error during {method.__name__}: {exc}") from exc

    return wrapper  # type: ignore[return-value]


class LinkStore:
    """Data access for links backed by SQLAlchemy and an optional Redis cache.

    Example:
        >>> store = LinkStore(db, cache=redis_client)
        >>> link = await store.create("https://example.com")
        >>> (await store.find_by_hash(link.hash)).url
        'https://example.com'
    """

    def __init__(
        self,
        db: AsyncSession,
        cache: redis.Redis | None = None,
        settings: Settings | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
        clock: Clock = utcnow,
        resolver: CollisionResolver | None = None,
    ) -> None:
        self._db = db
        self._cache = cache
        self._settings = settings or get_settings()
        self._logger = logger or logging.getLogger("linkshortener")
        self._clock = clock
        self._resolver = resolver or CollisionResolver(
            strategy=self._settings.HASH_STRATEGY,
            max_attempts=self._settings.MAX_HASH_ATTEMPTS,
            random_length=self._settings.RANDOM_HASH_LENGTH,
            logger=self._logger,
        )

    # ========================================================================
    # PUBLIC API METHODS
    # ========================================================================

    async def create(self, target_url: str, expires_at: datetime.datetime | None = None) -> Link:
        """Create and persist a new link.

        Args:
            target_url: Absolute URL the hash will redirect to
            expires_at: Optional expiration time (naive values are UTC)

        Returns:
            Link: The committed link, visible to every subsequent lookup

        Raises:
            InvalidTarget: If the URL is rejected; nothing is written.
            IdentifierSpaceExhausted: If no free hash was found.
            StorageError: If the database fails.
        """
        url = normalize_target_url(target_url, self._settings.MAX_URL_LENGTH)
        link = await self._resolver.reserve(self, url, as_utc(expires_at))
        await self._cache_link(link)
        return link

    async def find_by_hash(self, hash: str) -> Link | None:
        """Exact, case-sensitive lookup of a link; expiration is not applied."""
        cached = await self._lookup_from_cache(hash)
        if cached is not None:
            return cached

        link = await self._lookup_from_database(hash)
        if link is not None:
            await self._cache_link(link)
        return link

    @handle_storage_errors
    async def allocate_key(self) -> int:
        """Atomically increment and return the persisted link key counter."""
        name = self._settings.LINK_KEY_NAME
        stmt = (
            update(LinkKey)
            .where(LinkKey.name == name)
            .values(value=LinkKey.value + 1)
            .returning(LinkKey.value)
            .execution_options(synchronize_session=False)
        )
        result = await self._db.execute(stmt)
        key = result.scalar_one_or_none()
        if key is not None:
            await self._db.commit()
            return key

        # First key ever: seed the counter row. A concurrent seeder wins the
        # primary key race and this caller increments its row instead.
        self._db.add(LinkKey(name=name, value=1))
        try:
            await self._db.commit()
        except IntegrityError:
            await self._db.rollback()
            return await self.allocate_key()
        self._logger.info(f"Initialized link key counter '{name}'")
        return 1

    @handle_storage_errors
    async def reserve(
        self,
        key: int,
        candidate: str,
        target_url: str,
        expires_at: datetime.datetime | None,
    ) -> Link | None:
        """Insert a link under ``candidate`` or report a conflict.

        Returns:
            Link | None: The committed link, or None when the unique
            constraint rejected the row (nothing is persisted).
        """
        link = Link(
            id=key,
            hash=candidate,
            url=target_url,
            expires_at=expires_at,
            created_at=self._clock(),
        )
        self._db.add(link)
        try:
            await self._db.commit()
        except IntegrityError:
            await self._db.rollback()
            self._logger.debug(f"Insert rejected for hash {candidate} (key {key})")
            return None
        return link

    # ========================================================================
    # PRIVATE HELPER METHODS
    # ========================================================================

    @handle_storage_errors
    async def _lookup_from_database(self, hash: str) -> Link | None:
        result = await self._db.execute(select(Link).where(Link.hash == hash))
        return result.scalar_one_or_none()

    async def _lookup_from_cache(self, hash: str) -> Link | None:
        if self._cache is None:
            return None

        try:
            cached_data = await self._cache.get(f"{CACHE_KEY_PREFIX}:{hash}")
        except redis.RedisError as exc:
            self._logger.warning(f"Cache read failed for {hash}: {exc}")
            return None

        if not cached_data:
            CACHE_REQUESTS_TOTAL.labels(result="miss").inc()
            return None

        try:
            payload = CachedLinkPayload.model_validate_json(cached_data)
        except ValidationError as exc:
            self._logger.warning(f"Cache deserialization error for {hash}: {exc}")
            return None

        CACHE_REQUESTS_TOTAL.labels(result="hit").inc()
        return payload.to_link()

    async def _cache_link(self, link: Link) -> None:
        if self._cache is None:
            return

        payload = CachedLinkPayload.model_validate(link)
        try:
            await self._cache.setex(
                f"{CACHE_KEY_PREFIX}:{link.hash}",
                self._settings.CACHE_TTL_SECONDS,
                payload.model_dump_json(),
            )
        except redis.RedisError as exc:
            self._logger.warning(f"Cache write failed for {link.hash}: {exc}")
