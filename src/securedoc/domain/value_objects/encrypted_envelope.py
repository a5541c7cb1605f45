"""Encrypted envelope produced by the encryption engine."""

import struct
from dataclasses import dataclass

_MAGIC = b"SDE1"


@dataclass(frozen=True)
class EncryptedEnvelope:
    """Ciphertext with everything needed to authenticate and decrypt it.

    The envelope is stored as a single opaque blob. Layout of ``to_bytes``::

        b"SDE1" | u16 len | key_version | u8 len | iv | u8 len | auth_tag | ciphertext
    """

    ciphertext: bytes
    iv: bytes
    auth_tag: bytes
    key_version: str

    def __post_init__(self) -> None:
        for name in ("ciphertext", "iv", "auth_tag"):
            if not isinstance(getattr(self, name), bytes):
                raise ValueError(f"Envelope {name} must be bytes")
        if not isinstance(self.key_version, str):
            raise ValueError("Envelope key_version must be str")
        if not self.ciphertext:
            raise ValueError("Envelope ciphertext is required")
        if not self.iv:
            raise ValueError("Envelope iv is required")
        if not self.auth_tag:
            raise ValueError("Envelope auth_tag is required")
        if not self.key_version:
            raise ValueError("Envelope key_version is required")

    def to_bytes(self) -> bytes:
        version = self.key_version.encode("utf-8")
        return b"".join(
            [
                _MAGIC,
                struct.pack(">H", len(version)),
                version,
                struct.pack(">B", len(self.iv)),
                self.iv,
                struct.pack(">B", len(self.auth_tag)),
                self.auth_tag,
                self.ciphertext,
            ]
        )

    @classmethod
    def from_bytes(cls, blob: bytes) -> "EncryptedEnvelope":
        """Parse a stored blob. Raises ValueError if it is malformed."""
        if not blob.startswith(_MAGIC):
            raise ValueError("Not an encrypted envelope")
        offset = len(_MAGIC)
        try:
            (version_len,) = struct.unpack_from(">H", blob, offset)
            offset += 2
            version = blob[offset : offset + version_len]
            offset += version_len
            (iv_len,) = struct.unpack_from(">B", blob, offset)
            offset += 1
            iv = blob[offset : offset + iv_len]
            offset += iv_len
            (tag_len,) = struct.unpack_from(">B", blob, offset)
            offset += 1
            tag = blob[offset : offset + tag_len]
            offset += tag_len
        except struct.error as e:
            raise ValueError("Truncated encrypted envelope") from e
        if len(version) != version_len or len(iv) != iv_len or len(tag) != tag_len:
            raise ValueError("Truncated encrypted envelope")
        try:
            key_version = version.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValueError("Invalid key version encoding") from e
        return cls(
            ciphertext=blob[offset:],
            iv=iv,
            auth_tag=tag,
            key_version=key_version,
        )
