"""Exceptions raised by the link shortener core.

Classes:
    ShortenerError:
        Generic base class for link shortener exceptions.

    InvalidTarget:
        Raised when a target URL is empty, too long or not an absolute URL.

    InvalidIdentifier:
        Raised when decoding a string that is not a canonical identifier.

    IdentifierSpaceExhausted:
        Raised when no free hash was found within the retry budget.

    StorageError:
        Raised when the data store fails (connection issues, timeouts, etc.).

NOTE:
    An unknown or expired hash is not an exception. Resolving it yields a
    ``Resolution`` with ``ResolveStatus.NOT_FOUND`` or ``ResolveStatus.EXPIRED``.

Example:
    >>> from shortener.exceptions import InvalidTarget
    >>> raise InvalidTarget("URL cannot be empty")
    Traceback (most recent call last):
        ...
    shortener.exceptions.InvalidTarget: URL cannot be empty
"""

__all__ = [
    "ShortenerError",
    "InvalidTarget",
    "InvalidIdentifier",
    "IdentifierSpaceExhausted",
    "StorageError",
]


class ShortenerError(Exception):
    """Generic base class for link shortener exceptions."""

    pass


class InvalidTarget(ShortenerError, ValueError):
    """Exception raised when a target URL is rejected before persistence."""

    pass


class InvalidIdentifier(ShortenerError, ValueError):
    """Exception raised when an identifier cannot be decoded."""

    pass


class IdentifierSpaceExhausted(ShortenerError):
    """Exception raised when every hash candidate collided with an existing link."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"No free identifier found after {attempts} attempts")
        self.attempts = attempts


class StorageError(ShortenerError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, lost connections, etc.
    The underlying driver exception is available as ``__cause__``.
    """

    pass
