"""Content integrity: digest computation and comparison."""

import hashlib
import hmac

from securedoc.domain.value_objects import ContentHash


def digest(data: bytes) -> ContentHash:
    """SHA-256 of ``data``. Same bytes always give the same hash."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"digest expects bytes, got {type(data).__name__}")
    return ContentHash(value=hashlib.sha256(data).digest())


def matches(expected: ContentHash | bytes, data: bytes) -> bool:
    """Constant-time check that ``data`` hashes to ``expected``."""
    expected_value = expected.value if isinstance(expected, ContentHash) else expected
    return hmac.compare_digest(expected_value, digest(data).value)
