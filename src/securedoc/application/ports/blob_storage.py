"""Blob storage port as seen by use cases (breaker-protected)."""

from typing import Protocol


class BlobStorage(Protocol):
    """Port for storing encrypted blobs.

    Every failure surfaces as StorageUnavailableError.
    """

    async def put(
        self, blob: bytes, key: str, metadata: dict[str, str] | None = None
    ) -> str: ...

    async def get(self, locator: str) -> bytes: ...

    async def delete(self, locator: str) -> None: ...
