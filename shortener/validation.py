"""Target URL policy shared by the HTTP boundary and the link store."""

import validators

from shortener.exceptions import InvalidTarget

__all__ = ["normalize_target_url"]


def normalize_target_url(url: str, max_length: int) -> str:
    """Strip surrounding whitespace and validate ``url`` as an absolute URL.

    Raises:
        InvalidTarget: If the URL is empty, longer than ``max_length`` or
            not a well-formed absolute URL.
    """
    if not isinstance(url, str):
        raise InvalidTarget(f"URL must be a string, got {type(url).__name__}")

    candidate = url.strip()
    if not candidate:
        raise InvalidTarget("URL cannot be empty")
    if len(candidate) > max_length:
        raise InvalidTarget(f"URL exceeds maximum length of {max_length} characters")
    if not validators.url(candidate):
        raise InvalidTarget("Invalid URL")
    return candidate
