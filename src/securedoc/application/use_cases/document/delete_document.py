"""Delete document use case."""

from uuid import UUID

import structlog

from securedoc.application.ports import BlobStorage
from securedoc.domain.exceptions import NotFoundError

logger = structlog.get_logger(__name__)


class DeleteDocumentUseCase:
    """Remove the stored blob and mark the record deleted. Idempotent.

    The blob is deleted between two units of work so no transaction is held
    open across the storage call. If the blob delete fails the record stays
    live and the call can be repeated.
    """

    def __init__(self, unit_of_work_factory: type, storage: BlobStorage) -> None:
        self._uow_factory = unit_of_work_factory
        self._storage = storage

    async def execute(self, document_id: UUID) -> None:
        async with self._uow_factory() as uow:
            document = await uow.documents.get_by_id(document_id, include_deleted=True)
        if not document:
            raise NotFoundError("Document", str(document_id))
        if document.deleted_at is not None:
            return

        await self._storage.delete(document.storage_key)

        async with self._uow_factory() as uow:
            await uow.documents.mark_deleted(document_id)

        logger.info("document_deleted", document_id=str(document_id))
