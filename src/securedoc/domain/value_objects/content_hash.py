"""Content digest of a document's plaintext."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ContentHash:
    """SHA-256 hash of document plaintext (binary)."""

    value: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.value, bytes):
            raise TypeError("ContentHash value must be bytes")
        if len(self.value) != 32:
            raise ValueError("SHA-256 hash must be 32 bytes")

    def hex(self) -> str:
        return self.value.hex()
