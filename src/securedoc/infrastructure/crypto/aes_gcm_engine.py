"""AES-256-GCM envelope encryption."""

import os

import structlog
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from securedoc.application.ports import KeyProvider
from securedoc.domain.exceptions import DecryptionError, InternalError, KeyNotFoundError
from securedoc.domain.value_objects import EncryptedEnvelope

IV_SIZE = 12
TAG_SIZE = 16

logger = structlog.get_logger(__name__)


class AesGcmEncryptionEngine:
    """Authenticated encryption with keys from a KeyProvider.

    The key version is bound as associated data, so an envelope relabelled
    with another version fails authentication.
    """

    def __init__(self, key_provider: KeyProvider) -> None:
        self._key_provider = key_provider

    async def encrypt(self, plaintext: bytes) -> EncryptedEnvelope:
        """Encrypt with the active data key and a fresh random IV.

        Empty plaintext raises ValueError; an envelope always carries
        ciphertext.
        """
        if not plaintext:
            raise ValueError("Cannot encrypt empty plaintext")
        try:
            data_key = await self._key_provider.get_data_key()
            iv = os.urandom(IV_SIZE)
            sealed = AESGCM(data_key.key).encrypt(
                iv, bytes(plaintext), data_key.version.encode("utf-8")
            )
            return EncryptedEnvelope(
                ciphertext=sealed[:-TAG_SIZE],
                iv=iv,
                auth_tag=sealed[-TAG_SIZE:],
                key_version=data_key.version,
            )
        except Exception as e:
            logger.error("encryption_failed", error=str(e), error_type=type(e).__name__)
            raise InternalError("Failed to encrypt data") from e

    async def decrypt(self, envelope: EncryptedEnvelope) -> bytes:
        """Decrypt and authenticate. Raises DecryptionError on any failure."""
        try:
            key = await self._key_provider.resolve_key(envelope.key_version)
        except KeyNotFoundError as e:
            logger.warning("decryption_key_missing", key_version=envelope.key_version)
            raise DecryptionError(f"Unknown key version: {envelope.key_version}") from e
        except Exception as e:
            logger.warning(
                "decryption_key_unavailable",
                key_version=envelope.key_version,
                error=str(e),
            )
            raise DecryptionError("Key provider could not resolve key version") from e

        try:
            return AESGCM(key).decrypt(
                envelope.iv,
                envelope.ciphertext + envelope.auth_tag,
                envelope.key_version.encode("utf-8"),
            )
        except InvalidTag as e:
            logger.warning("decryption_auth_failed", key_version=envelope.key_version)
            raise DecryptionError("Authentication tag verification failed") from e
        except ValueError as e:
            raise DecryptionError(f"Invalid envelope parameters: {e}") from e
