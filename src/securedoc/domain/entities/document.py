"""Document entity."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from securedoc.domain.value_objects import DocumentStatus, DocumentType, VerificationResult


@dataclass
class Document:
    """Uploaded document: metadata, storage locator and verification state.

    ``content_hash`` is the SHA-256 of the plaintext, fixed at ingest.
    ``verified_at`` is set exactly when ``status`` is terminal.
    """

    id: UUID
    type: DocumentType
    status: DocumentStatus
    storage_key: str
    content_hash: bytes
    file_size: int
    mime_type: str
    file_name: str
    uploaded_at: datetime
    check_id: str | None = None
    verification_result: VerificationResult | None = None
    verified_at: datetime | None = None
    deleted_at: datetime | None = None
    version: int = 1

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
