"""Verify document use case - retrying state machine over the external service."""

import asyncio
import time
from datetime import UTC, datetime, timedelta
from uuid import UUID

import structlog

from securedoc.application.policies import RetryPolicy
from securedoc.application.ports import BlobStorage, EncryptionEngine, VerificationService
from securedoc.domain import integrity
from securedoc.domain.entities import Document
from securedoc.domain.exceptions import (
    DecryptionError,
    IntegrityError,
    InternalError,
    NotFoundError,
    StaleDocumentError,
    StorageUnavailableError,
    ValidationError,
    VerificationFailedError,
    VerificationRequestError,
    VerificationServiceError,
)
from securedoc.domain.value_objects import (
    DocumentStatus,
    EncryptedEnvelope,
    VerificationResult,
)
from securedoc.telemetry import PipelineMetrics

RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    StorageUnavailableError,
    DecryptionError,
    VerificationServiceError,
)

logger = structlog.get_logger(__name__)


class VerifyDocumentUseCase:
    """Drive a document from PENDING to a terminal status.

    Each attempt downloads, decrypts, integrity-checks and submits the
    document afresh. Attempts are governed by ``retry_policy`` and the whole
    operation by ``verification_timeout`` (seconds). The record is written
    exactly once, when the outcome is known.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        storage: BlobStorage,
        encryption_engine: EncryptionEngine,
        verification_service: VerificationService,
        retry_policy: RetryPolicy,
        *,
        confidence_threshold: float,
        verification_timeout: float,
        validity_window: timedelta,
        metrics: PipelineMetrics | None = None,
    ) -> None:
        if not 0.0 <= confidence_threshold <= 1.0:
            raise ValueError("confidence_threshold must be between 0.0 and 1.0")
        self._metrics = metrics or PipelineMetrics()
        self._uow_factory = unit_of_work_factory
        self._storage = storage
        self._encryption_engine = encryption_engine
        self._verification_service = verification_service
        self._retry_policy = retry_policy
        self._confidence_threshold = confidence_threshold
        self._verification_timeout = verification_timeout
        self._validity_window = validity_window

    async def execute(self, document_id: UUID) -> Document:
        """Verify with retry. Terminal documents are returned unchanged."""
        log = logger.bind(document_id=str(document_id))

        async with self._uow_factory() as uow:
            document = await uow.documents.get_by_id(document_id)
        if not document:
            raise NotFoundError("Document", str(document_id))
        if document.is_terminal:
            log.info("verification_skipped", status=document.status.value)
            return document

        started = time.perf_counter()
        now = datetime.now(UTC)
        if now - document.uploaded_at > self._validity_window:
            log.info("document_expired", uploaded_at=document.uploaded_at.isoformat())
            updated, _ = await self._complete(
                document, DocumentStatus.EXPIRED, attempts=0, started=started
            )
            return updated

        log.info("verification_started", status=DocumentStatus.PROCESSING.value)
        attempts = 0

        async def attempt() -> VerificationResult:
            nonlocal attempts
            attempts += 1
            return await self._attempt(document, attempts)

        try:
            async with asyncio.timeout(self._verification_timeout):
                result = await self._retry_policy.execute(attempt)
        except (NotFoundError, ValidationError):
            raise
        except IntegrityError:
            await self._complete(
                document, DocumentStatus.ERROR, attempts=attempts, started=started
            )
            raise
        except (TimeoutError, VerificationRequestError, *RETRYABLE_ERRORS) as e:
            log.error(
                "verification_failed",
                attempts=attempts,
                error=str(e),
                error_type=type(e).__name__,
            )
            updated, applied = await self._complete(
                document, DocumentStatus.ERROR, attempts=attempts, started=started
            )
            if not applied:
                return updated
            raise VerificationFailedError(document_id) from e
        except Exception as e:
            log.exception("verification_internal_error", attempts=attempts)
            updated, applied = await self._complete(
                document, DocumentStatus.ERROR, attempts=attempts, started=started
            )
            if not applied:
                return updated
            raise InternalError(f"Unexpected failure verifying document {document_id}") from e

        status = self._status_for(result)
        updated, _ = await self._complete(
            document, status, result, attempts=attempts, started=started
        )
        log.info(
            "verification_completed",
            status=updated.status.value,
            is_authentic=result.is_authentic,
            confidence_score=result.confidence_score,
            attempts=attempts,
        )
        return updated

    async def _attempt(self, document: Document, attempt: int) -> VerificationResult:
        logger.debug("verification_attempt", document_id=str(document.id), attempt=attempt)
        blob = await self._storage.get(document.storage_key)
        try:
            envelope = EncryptedEnvelope.from_bytes(blob)
        except ValueError as e:
            raise DecryptionError(f"Stored blob is not a valid envelope: {e}") from e
        plaintext = await self._encryption_engine.decrypt(envelope)

        if not integrity.matches(document.content_hash, plaintext):
            logger.warning(
                "security_event",
                kind="integrity_mismatch",
                document_id=str(document.id),
                storage_key=document.storage_key,
                expected_hash=document.content_hash.hex(),
            )
            raise IntegrityError(f"Content hash mismatch for document {document.id}")

        return await self._verification_service.verify(plaintext, document.type)

    def _status_for(self, result: VerificationResult) -> DocumentStatus:
        if not result.is_authentic:
            return DocumentStatus.REJECTED
        if result.confidence_score >= self._confidence_threshold:
            return DocumentStatus.VERIFIED
        return DocumentStatus.MANUAL_REVIEW_REQUIRED

    async def _complete(
        self,
        document: Document,
        status: DocumentStatus,
        result: VerificationResult | None = None,
        *,
        attempts: int,
        started: float,
    ) -> tuple[Document, bool]:
        """Single terminal write. Returns (record, applied).

        When another writer got there first the current record is returned
        with ``applied=False`` and nothing is counted for this call.
        """
        async with self._uow_factory() as uow:
            try:
                updated = await uow.documents.update_status(
                    document.id,
                    status,
                    expected_version=document.version,
                    verification_result=result,
                    verified_at=datetime.now(UTC),
                )
                self._metrics.record_verification(
                    status.value,
                    document.type.value,
                    attempts,
                    time.perf_counter() - started,
                )
                return updated, True
            except StaleDocumentError:
                current = await uow.documents.get_by_id(document.id)
        logger.warning(
            "verification_superseded",
            document_id=str(document.id),
            attempted_status=status.value,
        )
        if current is None:
            raise NotFoundError("Document", str(document.id))
        return current, False
