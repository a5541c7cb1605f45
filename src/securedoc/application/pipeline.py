"""Document pipeline - operations exposed to callers."""

from datetime import datetime
from uuid import UUID

from securedoc.application.dto.document_dto import DocumentIngestInput
from securedoc.application.use_cases.document.delete_document import DeleteDocumentUseCase
from securedoc.application.use_cases.document.expire_documents import (
    ExpireStaleDocumentsUseCase,
)
from securedoc.application.use_cases.document.get_document import GetDocumentUseCase
from securedoc.application.use_cases.document.ingest_document import IngestDocumentUseCase
from securedoc.application.use_cases.document.verify_document import VerifyDocumentUseCase
from securedoc.domain.entities import Document


class DocumentPipeline:
    """Facade over the document use cases."""

    def __init__(
        self,
        ingest_document: IngestDocumentUseCase,
        verify_document: VerifyDocumentUseCase,
        get_document: GetDocumentUseCase,
        delete_document: DeleteDocumentUseCase,
        expire_documents: ExpireStaleDocumentsUseCase,
    ) -> None:
        self._ingest_document = ingest_document
        self._verify_document = verify_document
        self._get_document = get_document
        self._delete_document = delete_document
        self._expire_documents = expire_documents

    async def ingest(self, data: bytes, metadata: DocumentIngestInput) -> Document:
        return await self._ingest_document.execute(data, metadata)

    async def verify_with_retry(self, document_id: UUID) -> Document:
        return await self._verify_document.execute(document_id)

    async def get_document(self, document_id: UUID) -> Document:
        return await self._get_document.execute(document_id)

    async def delete_document(self, document_id: UUID) -> None:
        await self._delete_document.execute(document_id)

    async def expire_stale_documents(self, now: datetime | None = None) -> list[Document]:
        return await self._expire_documents.execute(now)
