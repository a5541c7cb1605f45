"""Expire stale documents use case."""

from datetime import UTC, datetime, timedelta

import structlog

from securedoc.domain.entities import Document
from securedoc.domain.exceptions import StaleDocumentError
from securedoc.domain.value_objects import DocumentStatus

logger = structlog.get_logger(__name__)


class ExpireStaleDocumentsUseCase:
    """Move non-terminal documents past the validity window to EXPIRED."""

    def __init__(
        self,
        unit_of_work_factory: type,
        *,
        validity_window: timedelta,
        batch_size: int = 100,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._validity_window = validity_window
        self._batch_size = batch_size

    async def execute(self, now: datetime | None = None) -> list[Document]:
        """Returns the documents that were expired by this sweep."""
        now = now or datetime.now(UTC)
        cutoff = now - self._validity_window

        async with self._uow_factory() as uow:
            stale = await uow.documents.list_stale(cutoff, limit=self._batch_size)

        expired: list[Document] = []
        for document in stale:
            try:
                async with self._uow_factory() as uow:
                    updated = await uow.documents.update_status(
                        document.id,
                        DocumentStatus.EXPIRED,
                        expected_version=document.version,
                        verified_at=now,
                    )
            except StaleDocumentError:
                # another writer moved it first
                continue
            expired.append(updated)

        if expired:
            logger.info("documents_expired", count=len(expired), cutoff=cutoff.isoformat())
        return expired
