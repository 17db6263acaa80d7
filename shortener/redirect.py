"""Redirect resolver: turns a hash into a live target URL or a definitive outcome.

Link State (computed, never stored)
===================================
::
    ┌──────────┐   now > expires_at   ┌──────────┐
    │  Active  │ ───────────────────► │ Expired  │
    └──────────┘    (one way)         └──────────┘

A link without ``expires_at`` stays Active forever. The clock is read once per
resolution and that single reading is used for the whole decision.
"""

import datetime
import logging
from dataclasses import dataclass
from typing import Protocol

from shortener import codec
from shortener.clock import Clock, utcnow
from shortener.enums import ResolveStatus
from shortener.models import HASH_MAX_LENGTH, Link

__all__ = ["LinkFinder", "Resolution", "RedirectResolver"]


class LinkFinder(Protocol):
    async def find_by_hash(self, hash: str) -> Link | None: ...


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a hash.

    Attributes:
        status: OK, EXPIRED or NOT_FOUND
        link: The stored record (None only for NOT_FOUND)
        resolved_at: Clock reading the decision was made with
    """

    status: ResolveStatus
    link: Link | None = None
    resolved_at: datetime.datetime | None = None

    @property
    def target_url(self) -> str | None:
        if self.status is ResolveStatus.OK and self.link is not None:
            return self.link.url
        return None

    @property
    def ok(self) -> bool:
        return self.status is ResolveStatus.OK


class RedirectResolver:
    def __init__(
        self,
        store: LinkFinder,
        clock: Clock = utcnow,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._logger = logger or logging.getLogger("linkshortener")

    async def resolve(self, hash: str) -> Resolution:
        """Resolve ``hash`` to OK(target), EXPIRED or NOT_FOUND.

        Strings that cannot be a hash are NOT_FOUND without touching the store.
        Storage failures propagate as StorageError.
        """
        if not codec.is_identifier(hash, max_length=HASH_MAX_LENGTH):
            self._logger.info(f"Resolve: malformed hash {hash!r}")
            return Resolution(ResolveStatus.NOT_FOUND)

        link = await self._store.find_by_hash(hash)
        if link is None:
            self._logger.info(f"Resolve: hash {hash} not found")
            return Resolution(ResolveStatus.NOT_FOUND)

        now = self._clock()
        if link.is_expired(now):
            self._logger.info(f"Resolve: hash {hash} expired at {link.expires_at}")
            return Resolution(ResolveStatus.EXPIRED, link, now)

        return Resolution(ResolveStatus.OK, link, now)
