"""Object store port - remote blob storage."""

from typing import Protocol


class ObjectStore(Protocol):
    """Port for put/get/delete of opaque blobs."""

    async def put(self, data: bytes, key: str, metadata: dict[str, str]) -> str: ...

    async def get(self, locator: str) -> bytes: ...

    async def delete(self, locator: str) -> None: ...
