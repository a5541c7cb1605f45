"""Encryption adapters."""

from securedoc.infrastructure.crypto.aes_gcm_engine import AesGcmEncryptionEngine
from securedoc.infrastructure.crypto.keyring import LocalKeyring, key_version

__all__ = [
    "AesGcmEncryptionEngine",
    "LocalKeyring",
    "key_version",
]
