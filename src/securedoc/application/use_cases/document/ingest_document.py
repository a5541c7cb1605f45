"""Ingest document use case."""

import re
from collections.abc import Iterable
from datetime import UTC, datetime
from uuid import UUID, uuid4

import structlog

from securedoc.application.dto.document_dto import DocumentIngestInput
from securedoc.application.ports import BlobStorage, EncryptionEngine
from securedoc.domain import integrity
from securedoc.domain.entities import Document
from securedoc.domain.exceptions import InternalError, StorageUnavailableError, ValidationError
from securedoc.domain.value_objects import DocumentStatus, DocumentType

logger = structlog.get_logger(__name__)

_EXTENSION = re.compile(r"^[a-z0-9]{1,10}$")


class IngestDocumentUseCase:
    """Validate, hash, encrypt, store and record a new document in PENDING."""

    def __init__(
        self,
        unit_of_work_factory: type,
        encryption_engine: EncryptionEngine,
        storage: BlobStorage,
        *,
        max_file_size: int,
        allowed_mime_types: Iterable[str],
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._encryption_engine = encryption_engine
        self._storage = storage
        self._max_file_size = max_file_size
        self._allowed_mime_types = frozenset(allowed_mime_types)

    async def execute(self, data: bytes, input_data: DocumentIngestInput) -> Document:
        """Ingest raw bytes. Does not retry; the caller controls re-upload."""
        document_type = self._validate(data, input_data)
        content_hash = integrity.digest(data)

        try:
            envelope = await self._encryption_engine.encrypt(data)
        except InternalError:
            raise
        except Exception as e:
            logger.error("ingest_encryption_failed", error=str(e), exc_info=True)
            raise InternalError("Failed to encrypt document") from e

        now = datetime.now(UTC)
        doc_id = uuid4()
        storage_key = _storage_key(doc_id, input_data.file_name, now)
        locator = await self._storage.put(
            envelope.to_bytes(),
            storage_key,
            {
                "key-version": envelope.key_version,
                "content-hash": content_hash.hex(),
                "mime-type": input_data.mime_type,
                "original-size": str(len(data)),
            },
        )

        document = Document(
            id=doc_id,
            type=document_type,
            status=DocumentStatus.PENDING,
            storage_key=locator,
            content_hash=content_hash.value,
            file_size=len(data),
            mime_type=input_data.mime_type,
            file_name=input_data.file_name,
            uploaded_at=now,
            check_id=input_data.check_id,
        )
        try:
            async with self._uow_factory() as uow:
                await uow.documents.create(document)
        except Exception:
            await self._discard_blob(locator)
            raise

        logger.info(
            "document_ingested",
            document_id=str(doc_id),
            check_id=input_data.check_id,
            type=document_type.value,
            size=len(data),
        )
        return document

    def _validate(self, data: bytes, input_data: DocumentIngestInput) -> DocumentType:
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError(f"ingest expects bytes, got {type(data).__name__}")

        errors: list[dict[str, str]] = []
        if len(data) == 0:
            errors.append({"field": "fileSize", "message": "File is empty"})
        elif len(data) > self._max_file_size:
            errors.append(
                {
                    "field": "fileSize",
                    "message": f"File size exceeds maximum allowed size of {self._max_file_size} bytes",
                }
            )
        if input_data.mime_type not in self._allowed_mime_types:
            errors.append(
                {
                    "field": "mimeType",
                    "message": "Invalid file type. Allowed types: "
                    + ", ".join(sorted(self._allowed_mime_types)),
                }
            )
        document_type: DocumentType | None = None
        try:
            document_type = DocumentType(input_data.document_type)
        except ValueError:
            errors.append({"field": "documentType", "message": "Invalid document type"})

        if errors or document_type is None:
            logger.info("ingest_rejected", errors=errors)
            raise ValidationError("Invalid upload parameters", errors)
        return document_type

    async def _discard_blob(self, locator: str) -> None:
        try:
            await self._storage.delete(locator)
        except StorageUnavailableError as e:
            logger.warning("orphaned_blob", locator=locator, error=str(e))


def _storage_key(document_id: UUID, file_name: str, now: datetime) -> str:
    """``documents/{id}/{epoch_ms}.{ext}``; the extension falls back to ``bin``."""
    extension = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    if not _EXTENSION.match(extension):
        extension = "bin"
    return f"documents/{document_id}/{int(now.timestamp() * 1000)}.{extension}"
