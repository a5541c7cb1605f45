"""Get document use case."""

from uuid import UUID

from securedoc.domain.entities import Document
from securedoc.domain.exceptions import NotFoundError


class GetDocumentUseCase:
    """Get document by id."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, document_id: UUID) -> Document:
        async with self._uow_factory() as uow:
            document = await uow.documents.get_by_id(document_id)
        if not document:
            raise NotFoundError("Document", str(document_id))
        return document
