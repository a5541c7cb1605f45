"""Encryption engine port."""

from typing import Protocol

from securedoc.domain.value_objects import EncryptedEnvelope


class EncryptionEngine(Protocol):
    """Port for authenticated envelope encryption."""

    async def encrypt(self, plaintext: bytes) -> EncryptedEnvelope: ...

    async def decrypt(self, envelope: EncryptedEnvelope) -> bytes: ...
