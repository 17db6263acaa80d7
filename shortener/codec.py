"""Identifier codec: converts record keys to short printable hashes and back.

Two ways of producing a hash are supported, both over the same 62-symbol,
case-sensitive alphabet:

- ``encode(key)``: positional base62 conversion of a non-negative integer key.
  Deterministic and injective; ``decode`` is its exact inverse.
- ``generate_random_identifier(length)``: a fixed-length random string drawn
  with nanoid (cryptographically secure source). Collisions are possible and
  are handled by ``shortener.collision``.

Example:
    >>> encode(12345)
    '3d7'
    >>> decode('3d7')
    12345
    >>> decode('03d7')
    Traceback (most recent call last):
        ...
    shortener.exceptions.InvalidIdentifier: Identifier '03d7' has leading zero padding
"""

from nanoid import generate

from shortener.exceptions import InvalidIdentifier

__all__ = [
    "BASE62_ALPHABET",
    "encode",
    "decode",
    "generate_random_identifier",
    "is_identifier",
]

BASE62_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
BASE = len(BASE62_ALPHABET)

_ALPHABET_INDEX = {char: index for index, char in enumerate(BASE62_ALPHABET)}


def encode(key: int) -> str:
    """Encode a non-negative integer key to a base62 identifier.

    Args:
        key: Key to encode (must be non-negative)

    Returns:
        str: Base62 identifier, most significant digit first

    Example:
        >>> encode(62)
        '10'
    """
    if isinstance(key, bool) or not isinstance(key, int):
        raise TypeError(f"Key must be of type integer (given type: {type(key).__name__})")
    if key < 0:
        raise ValueError("Key must be non-negative")

    if key == 0:
        return BASE62_ALPHABET[0]

    result = []
    while key > 0:
        key, remainder = divmod(key, BASE)
        result.append(BASE62_ALPHABET[remainder])

    return "".join(result[::-1])


def decode(identifier: str) -> int:
    """Decode a base62 identifier back to its key.

    Only canonical identifiers (as produced by ``encode``) are accepted, so that
    each key has exactly one spelling.

    Args:
        identifier: Identifier to decode

    Returns:
        int: The key that encodes to ``identifier``

    Raises:
        InvalidIdentifier: If the identifier is empty, contains characters
            outside the alphabet, or has leading zero padding.
    """
    if not isinstance(identifier, str) or not identifier:
        raise InvalidIdentifier("Identifier must be a non-empty string")
    if len(identifier) > 1 and identifier[0] == BASE62_ALPHABET[0]:
        raise InvalidIdentifier(f"Identifier '{identifier}' has leading zero padding")

    key = 0
    for char in identifier:
        digit = _ALPHABET_INDEX.get(char)
        if digit is None:
            raise InvalidIdentifier(f"Identifier '{identifier}' contains invalid character {char!r}")
        key = key * BASE + digit
    return key


def generate_random_identifier(length: int = 6) -> str:
    assert isinstance(length, int) and length > 0, f"length must be a positive integer, got {length!r}"
    return generate(BASE62_ALPHABET, length)


def is_identifier(value: str, max_length: int | None = None) -> bool:
    """Check that ``value`` only uses alphabet symbols (any strategy's hash)."""
    if not value:
        return False
    if max_length is not None and len(value) > max_length:
        return False
    return all(char in _ALPHABET_INDEX for char in value)
