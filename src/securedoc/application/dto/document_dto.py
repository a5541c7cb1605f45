"""Document DTOs."""

from dataclasses import dataclass

from securedoc.domain.value_objects import DocumentType


@dataclass
class DocumentIngestInput:
    """Metadata accompanying raw bytes at ingest."""

    document_type: DocumentType | str
    mime_type: str
    file_name: str
    check_id: str | None = None
