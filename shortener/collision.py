"""Collision resolution for new link hashes.

Every attempt allocates a fresh key, proposes a hash for it and hands both to
the store's atomic insert-or-fail ``reserve``. A conflict means the unique
constraint on ``hash`` (or ``id``) rejected the row; nothing was persisted and
the next attempt starts from scratch.

Attempt Loop
============
::
    ┌──────────────┐
    │ allocate_key │◄─────────────┐
    └──────┬───────┘              │
           ▼                      │
    ┌──────────────┐              │
    │ propose hash │              │
    │ (encode or   │              │ CONFLICT
    │  random)     │              │ (attempt < max)
    └──────┬───────┘              │
           ▼                      │
    ┌──────────────┐              │
    │ reserve()    ├──────────────┘
    │ insert-or-   │
    │ fail         │
    └──────┬───────┘
    ACCEPTED│          attempts exhausted
           ▼                 ▼
       return Link   IdentifierSpaceExhausted

Key Behaviours
===============
- No check-then-insert: uniqueness is decided by the database in one statement.
- The retry budget is per call; concurrent callers never share it.
- With the sequential strategy a conflict only happens when a historic random
  hash equals ``encode(key)``; the next key is encoded instead.
"""

import datetime
import logging
from typing import Protocol

from shortener import codec
from shortener.enums import HashStrategy
from shortener.exceptions import IdentifierSpaceExhausted
from shortener.metrics import HASH_COLLISIONS_TOTAL
from shortener.models import Link

__all__ = ["LinkReserver", "CollisionResolver"]

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_RANDOM_LENGTH = 6


class LinkReserver(Protocol):
    """Storage operations the resolver relies on."""

    async def allocate_key(self) -> int: ...

    async def reserve(
        self,
        key: int,
        candidate: str,
        target_url: str,
        expires_at: datetime.datetime | None,
    ) -> Link | None: ...


class CollisionResolver:
    """Finds a free hash for a new link within a bounded number of attempts.

    Example:
        >>> resolver = CollisionResolver(HashStrategy.RANDOM, max_attempts=10)
        >>> link = await resolver.reserve(store, "https://example.com", None)
        >>> len(link.hash)
        6
    """

    def __init__(
        self,
        strategy: HashStrategy = HashStrategy.SEQUENTIAL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        random_length: int = DEFAULT_RANDOM_LENGTH,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.strategy = HashStrategy(strategy)
        self.max_attempts = max_attempts
        self.random_length = random_length
        self._logger = logger or logging.getLogger("linkshortener")

    def propose(self, key: int) -> str:
        if self.strategy is HashStrategy.SEQUENTIAL:
            return codec.encode(key)
        return codec.generate_random_identifier(self.random_length)

    async def reserve(
        self,
        store: LinkReserver,
        target_url: str,
        expires_at: datetime.datetime | None = None,
    ) -> Link:
        """Persist a new link under the first candidate the store accepts.

        Raises:
            IdentifierSpaceExhausted: If every attempt conflicted.
            StorageError: Propagated from the store without retrying.
        """
        for attempt in range(1, self.max_attempts + 1):
            key = await store.allocate_key()
            candidate = self.propose(key)
            link = await store.reserve(key, candidate, target_url, expires_at)
            if link is not None:
                if attempt > 1:
                    self._logger.info(f"Hash {candidate} reserved after {attempt} attempts")
                return link

            HASH_COLLISIONS_TOTAL.labels(strategy=self.strategy.value).inc()
            self._logger.warning(
                f"Hash collision on attempt {attempt}/{self.max_attempts}: {candidate}"
            )

        self._logger.error(f"Identifier space exhausted after {self.max_attempts} attempts")
        raise IdentifierSpaceExhausted(self.max_attempts)
