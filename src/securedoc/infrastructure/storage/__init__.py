"""Blob storage adapters."""

from securedoc.infrastructure.storage.circuit_breaker import (
    CircuitBreaker,
    CircuitOpenError,
    CircuitState,
)
from securedoc.infrastructure.storage.resilient_storage import ResilientStorageClient
from securedoc.infrastructure.storage.s3_object_store import S3ObjectStore

__all__ = [
    "CircuitBreaker",
    "CircuitOpenError",
    "CircuitState",
    "ResilientStorageClient",
    "S3ObjectStore",
]
