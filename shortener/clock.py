"""UTC clock source and timestamp normalisation."""

import datetime
from collections.abc import Callable

__all__ = ["Clock", "utcnow", "as_utc"]

Clock = Callable[[], datetime.datetime]


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def as_utc(value: datetime.datetime | None) -> datetime.datetime | None:
    """Return ``value`` as an aware UTC datetime.

    Naive values are taken to already be UTC (SQLite returns naive timestamps).
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.UTC)
    return value.astimezone(datetime.UTC)
