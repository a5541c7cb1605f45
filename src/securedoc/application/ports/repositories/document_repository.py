"""Document repository port."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from securedoc.domain.entities import Document
from securedoc.domain.value_objects import DocumentStatus, VerificationResult


class DocumentRepository(Protocol):
    """Port for document persistence."""

    async def get_by_id(
        self, document_id: UUID, include_deleted: bool = False
    ) -> Document | None: ...

    async def create(self, document: Document) -> Document: ...

    async def update_status(
        self,
        document_id: UUID,
        status: DocumentStatus,
        *,
        expected_version: int,
        verification_result: VerificationResult | None = None,
        verified_at: datetime | None = None,
    ) -> Document:
        """Apply status, result and timestamp together.

        Raises StaleDocumentError if the stored version is not
        ``expected_version``.
        """
        ...

    async def mark_deleted(self, document_id: UUID) -> None: ...

    async def list_stale(self, uploaded_before: datetime, limit: int = 100) -> list[Document]:
        """Non-terminal, non-deleted documents uploaded before the cutoff."""
        ...
