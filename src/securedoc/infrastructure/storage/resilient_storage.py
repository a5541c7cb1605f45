"""Object store client protected by a circuit breaker."""

import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

from securedoc.application.ports import ObjectStore
from securedoc.domain.exceptions import StorageUnavailableError
from securedoc.infrastructure.storage.circuit_breaker import CircuitBreaker, CircuitOpenError
from securedoc.telemetry import PipelineMetrics

T = TypeVar("T")

logger = structlog.get_logger(__name__)


class ResilientStorageClient:
    """put/get/delete of encrypted blobs through a shared CircuitBreaker.

    Open circuit, collaborator failure and timeout all raise
    StorageUnavailableError; retrying is left to the caller. Every call is
    counted and timed by outcome.
    """

    def __init__(
        self,
        object_store: ObjectStore,
        breaker: CircuitBreaker,
        metrics: PipelineMetrics | None = None,
    ) -> None:
        self._store = object_store
        self._breaker = breaker
        self._metrics = metrics or PipelineMetrics()

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    async def put(self, blob: bytes, key: str, metadata: dict[str, str] | None = None) -> str:
        """Upload blob under key. Returns the locator."""
        locator = await self._guarded("put", key, self._store.put, blob, key, metadata or {})
        logger.info("storage_put", key=key, size=len(blob))
        return locator

    async def get(self, locator: str) -> bytes:
        return await self._guarded("get", locator, self._store.get, locator)

    async def delete(self, locator: str) -> None:
        await self._guarded("delete", locator, self._store.delete, locator)

    async def _guarded(
        self,
        operation: str,
        locator: str,
        func: Callable[..., Awaitable[T]],
        *args: Any,
    ) -> T:
        started = time.perf_counter()
        try:
            result = await self._breaker.call(func, *args)
        except CircuitOpenError as e:
            self._record(operation, "circuit_open", started)
            logger.warning(
                "storage_circuit_open",
                operation=operation,
                locator=locator,
                retry_after=e.retry_after,
            )
            raise StorageUnavailableError(
                f"Storage unavailable: circuit open, retry in {e.retry_after:.1f}s"
            ) from e
        except TimeoutError as e:
            self._record(operation, "timeout", started)
            logger.error("storage_timeout", operation=operation, locator=locator)
            raise StorageUnavailableError(f"Storage {operation} timed out") from e
        except Exception as e:
            self._record(operation, "error", started)
            logger.error(
                "storage_operation_failed",
                operation=operation,
                locator=locator,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StorageUnavailableError(f"Storage {operation} failed: {e}") from e
        self._record(operation, "success", started)
        return result

    def _record(self, operation: str, outcome: str, started: float) -> None:
        self._metrics.record_storage(operation, outcome, time.perf_counter() - started)
