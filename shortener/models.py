"""SQLAlchemy ORM models for the link shortener service.

This module defines the database schema using SQLAlchemy declarative models
with a unique hash index and a persisted key counter.

Data Model Layout
=================
::
    links table (append-only)
    ├─ id (BIGINT PRIMARY KEY, allocated from link_keys)
    ├─ url (VARCHAR(2048) NOT NULL)
    ├─ hash (VARCHAR(64) UNIQUE, INDEXED)
    ├─ expires_at (TIMESTAMPTZ NULL)
    └─ created_at (TIMESTAMPTZ, DEFAULT NOW())

    link_keys table
    ├─ name (VARCHAR(64) PRIMARY KEY)
    └─ value (BIGINT NOT NULL)

How to Use
===========
**Step 1 — Import**::
    from shortener.models import Link

**Step 2 — Query a link**::
    result = await db.execute(select(Link).where(Link.hash == "3d7"))
    link = result.scalar_one_or_none()

**Step 3 — Check logical expiration**::
    link.is_expired(utcnow())

Key Behaviours
===============
- hash is unique across the whole table and never reused, even after expiry.
- Rows are never updated after insertion; expiration is computed at read time.
- id values come from the link_keys counter, so they are never reused either.

Classes:
    Link:  A short hash mapped to its target URL.
    LinkKey:  Atomically incremented key counter.
"""

import datetime

from sqlalchemy import BigInteger, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from shortener.clock import as_utc
from shortener.database import Base

__all__ = ["Link", "LinkKey", "HASH_MAX_LENGTH", "URL_MAX_LENGTH"]

HASH_MAX_LENGTH = 64
URL_MAX_LENGTH = 2048


class Link(Base):
    __tablename__ = "links"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    url: Mapped[str] = mapped_column(String(URL_MAX_LENGTH), nullable=False)
    hash: Mapped[str] = mapped_column(String(HASH_MAX_LENGTH), unique=True, index=True, nullable=False)
    expires_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def is_expired(self, now: datetime.datetime) -> bool:
        """A link is expired once ``now`` is strictly past ``expires_at``."""
        if self.expires_at is None:
            return False
        return as_utc(now) > as_utc(self.expires_at)

    def __repr__(self) -> str:
        return f"<Link(id={self.id}, hash='{self.hash}', expires_at={self.expires_at})>"


class LinkKey(Base):
    __tablename__ = "link_keys"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[int] = mapped_column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return f"<LinkKey(name='{self.name}', value={self.value})>"
