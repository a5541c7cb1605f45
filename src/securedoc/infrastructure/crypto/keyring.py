"""Local keyring - versioned AES-256 keys held in process memory."""

import base64
import hashlib
import os
from collections.abc import Iterable

import structlog

from securedoc.application.ports import DataKey
from securedoc.domain.exceptions import KeyNotFoundError

KEY_SIZE = 32

logger = structlog.get_logger(__name__)


def key_version(key: bytes) -> str:
    """Version label derived from key material: first 8 hex chars of SHA-256."""
    return hashlib.sha256(key).hexdigest()[:8]


class LocalKeyring:
    """Key provider backed by configured key material.

    The active key encrypts new data. Retired keys are kept so envelopes
    written before a rotation stay decryptable.
    """

    def __init__(self, active_key: bytes, retired_keys: Iterable[bytes] = ()) -> None:
        self._keys: dict[str, bytes] = {}
        for key in retired_keys:
            self._add(key)
        self._active_version = self._add(active_key)

    @classmethod
    def from_base64(cls, active_key: str, retired_keys: Iterable[str] = ()) -> "LocalKeyring":
        return cls(
            base64.b64decode(active_key),
            [base64.b64decode(k) for k in retired_keys],
        )

    @property
    def active_version(self) -> str:
        return self._active_version

    @property
    def versions(self) -> list[str]:
        return list(self._keys)

    def rotate(self, new_key: bytes | None = None) -> str:
        """Make ``new_key`` (random if omitted) the active key. Returns its version."""
        self._active_version = self._add(new_key if new_key is not None else os.urandom(KEY_SIZE))
        logger.info("encryption_key_rotated", key_version=self._active_version)
        return self._active_version

    async def get_data_key(self) -> DataKey:
        return DataKey(key=self._keys[self._active_version], version=self._active_version)

    async def resolve_key(self, version: str) -> bytes:
        try:
            return self._keys[version]
        except KeyError:
            raise KeyNotFoundError(f"Encryption key version not found: {version}") from None

    def _add(self, key: bytes) -> str:
        if len(key) != KEY_SIZE:
            raise ValueError(f"Encryption key must be {KEY_SIZE} bytes")
        version = key_version(key)
        self._keys[version] = key
        return version
