"""Key provider port - source of data keys for envelope encryption."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class DataKey:
    """Plaintext data key and the version that identifies it."""

    key: bytes
    version: str


class KeyProvider(Protocol):
    """Port for obtaining and resolving encryption keys.

    Retired versions must stay resolvable for as long as any document
    encrypted with them exists.
    """

    async def get_data_key(self) -> DataKey: ...

    async def resolve_key(self, version: str) -> bytes: ...
