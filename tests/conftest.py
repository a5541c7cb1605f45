"""Pytest fixtures for SecureDoc tests."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock
from uuid import UUID

import pytest
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader

from securedoc.application.pipeline import DocumentPipeline
from securedoc.application.policies import RetryPolicy
from securedoc.application.use_cases.document.delete_document import DeleteDocumentUseCase
from securedoc.application.use_cases.document.expire_documents import (
    ExpireStaleDocumentsUseCase,
)
from securedoc.application.use_cases.document.get_document import GetDocumentUseCase
from securedoc.application.use_cases.document.ingest_document import IngestDocumentUseCase
from securedoc.application.use_cases.document.verify_document import (
    RETRYABLE_ERRORS,
    VerifyDocumentUseCase,
)
from securedoc.domain.entities import Document
from securedoc.domain.exceptions import NotFoundError, StaleDocumentError
from securedoc.domain.value_objects import DocumentStatus, VerificationResult
from securedoc.infrastructure.crypto import AesGcmEncryptionEngine, LocalKeyring
from securedoc.infrastructure.storage import CircuitBreaker, ResilientStorageClient
from securedoc.telemetry import PipelineMetrics

ACTIVE_KEY = bytes(range(32))
ALLOWED_MIME_TYPES = ["application/pdf", "image/jpeg", "image/png", "image/heic", "image/tiff"]


# --- Fake repositories ---


class FakeDocumentRepository:
    """In-memory document repository with optimistic version checks."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, Document] = {}

    async def get_by_id(
        self, document_id: UUID, include_deleted: bool = False
    ) -> Document | None:
        doc = self._by_id.get(document_id)
        if not doc or (not include_deleted and doc.deleted_at):
            return None
        return doc

    async def create(self, document: Document) -> Document:
        self._by_id[document.id] = document
        return document

    async def update_status(
        self,
        document_id: UUID,
        status: DocumentStatus,
        *,
        expected_version: int,
        verification_result: VerificationResult | None = None,
        verified_at: datetime | None = None,
    ) -> Document:
        doc = await self.get_by_id(document_id)
        if doc is None:
            raise NotFoundError("Document", str(document_id))
        if doc.version != expected_version:
            raise StaleDocumentError(f"Document {document_id} changed")
        updated = replace(
            doc,
            status=status,
            verification_result=verification_result,
            verified_at=verified_at,
            version=doc.version + 1,
        )
        self._by_id[document_id] = updated
        return updated

    async def mark_deleted(self, document_id: UUID) -> None:
        doc = self._by_id.get(document_id)
        if doc and doc.deleted_at is None:
            self._by_id[document_id] = replace(doc, deleted_at=datetime.now(UTC))

    async def list_stale(self, uploaded_before: datetime, limit: int = 100) -> list[Document]:
        items = [
            d
            for d in self._by_id.values()
            if not d.is_terminal and d.deleted_at is None and d.uploaded_at < uploaded_before
        ]
        items.sort(key=lambda d: d.uploaded_at)
        return items[:limit]

    def backdate(self, document_id: UUID, days: int) -> None:
        """Helper to move uploaded_at into the past (for tests)."""
        doc = self._by_id[document_id]
        self._by_id[document_id] = replace(
            doc, uploaded_at=doc.uploaded_at - timedelta(days=days)
        )


# --- Fake UnitOfWork ---


class FakeUnitOfWork:
    """In-memory Unit of Work with fake repositories."""

    def __init__(self) -> None:
        self.documents = FakeDocumentRepository()

    async def commit(self) -> None:
        pass

    async def rollback(self) -> None:
        pass


# --- Fake object store ---


class InMemoryObjectStore:
    """Object store keeping blobs in a dict.

    ``fail`` makes every call raise; ``fail_gets`` makes only the next N gets raise.
    """

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.metadata: dict[str, dict[str, str]] = {}
        self.fail = False
        self.fail_gets = 0
        self.calls = 0
        self.get_calls = 0

    async def put(self, data: bytes, key: str, metadata: dict[str, str]) -> str:
        self._check()
        self.blobs[key] = bytes(data)
        self.metadata[key] = dict(metadata)
        return key

    async def get(self, locator: str) -> bytes:
        self.get_calls += 1
        self._check()
        if self.fail_gets:
            self.fail_gets -= 1
            raise ConnectionError("object store read failed")
        return self.blobs[locator]

    async def delete(self, locator: str) -> None:
        self._check()
        self.blobs.pop(locator, None)
        self.metadata.pop(locator, None)

    def _check(self) -> None:
        self.calls += 1
        if self.fail:
            raise ConnectionError("object store unreachable")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def metric_points(reader: InMemoryMetricReader, name: str) -> list:
    """Data points recorded so far for the metric called ``name``."""
    data = reader.get_metrics_data()
    if data is None:
        return []
    return [
        point
        for resource in data.resource_metrics
        for scope in resource.scope_metrics
        for metric in scope.metrics
        if metric.name == name
        for point in metric.data.data_points
    ]


def make_result(
    is_authentic: bool = True, confidence_score: float = 0.95
) -> VerificationResult:
    """VerificationResult as returned by the external service."""
    return VerificationResult(
        is_authentic=is_authentic,
        confidence_score=confidence_score,
        issues=() if is_authentic else ("tampered",),
        verified_by="AI_SYSTEM",
        verification_timestamp=datetime.now(UTC),
        verification_method="AI_ML_MODEL",
    )


# --- Fixtures ---


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    """Shared in-memory UnitOfWork for one test."""
    return FakeUnitOfWork()


@pytest.fixture
def uow_factory(fake_uow: FakeUnitOfWork):
    """Factory returning async context manager over the shared FakeUnitOfWork."""

    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUnitOfWork]:
        yield fake_uow

    return _factory


@pytest.fixture
def keyring() -> LocalKeyring:
    return LocalKeyring(ACTIVE_KEY)


@pytest.fixture
def encryption_engine(keyring: LocalKeyring) -> AesGcmEncryptionEngine:
    return AesGcmEncryptionEngine(keyring)


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def metric_reader() -> InMemoryMetricReader:
    return InMemoryMetricReader()


@pytest.fixture
def pipeline_metrics(metric_reader: InMemoryMetricReader) -> PipelineMetrics:
    """Instruments on a private MeterProvider read by ``metric_reader``."""
    provider = MeterProvider(metric_readers=[metric_reader])
    return PipelineMetrics(provider.get_meter("securedoc-tests"))


@pytest.fixture
def storage(
    object_store: InMemoryObjectStore, clock: FakeClock, pipeline_metrics: PipelineMetrics
) -> ResilientStorageClient:
    """Storage client whose breaker only trips after a burst of failures."""
    breaker = CircuitBreaker(
        "object-store",
        failure_rate_threshold=0.5,
        window_seconds=10.0,
        minimum_calls=10,
        reset_timeout=30.0,
        call_timeout=5.0,
        clock=clock,
        metrics=pipeline_metrics,
    )
    return ResilientStorageClient(object_store, breaker, pipeline_metrics)


@pytest.fixture
def mock_verification_service():
    """AsyncMock for VerificationService - authentic with 0.95 by default."""
    mock = AsyncMock()
    mock.verify.return_value = make_result()
    return mock


@pytest.fixture
def mock_sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def retry_policy(mock_sleep: AsyncMock) -> RetryPolicy:
    return RetryPolicy(
        base_delay=1.0,
        factor=2.0,
        max_delay=5.0,
        max_attempts=3,
        retry_on=RETRYABLE_ERRORS,
        sleep=mock_sleep,
    )


@pytest.fixture
def ingest_use_case(uow_factory, encryption_engine, storage) -> IngestDocumentUseCase:
    return IngestDocumentUseCase(
        unit_of_work_factory=uow_factory,
        encryption_engine=encryption_engine,
        storage=storage,
        max_file_size=10 * 1024 * 1024,
        allowed_mime_types=ALLOWED_MIME_TYPES,
    )


@pytest.fixture
def verify_use_case(
    uow_factory,
    storage,
    encryption_engine,
    mock_verification_service,
    retry_policy,
    pipeline_metrics,
) -> VerifyDocumentUseCase:
    return VerifyDocumentUseCase(
        unit_of_work_factory=uow_factory,
        storage=storage,
        encryption_engine=encryption_engine,
        verification_service=mock_verification_service,
        retry_policy=retry_policy,
        confidence_threshold=0.8,
        verification_timeout=30.0,
        validity_window=timedelta(days=30),
        metrics=pipeline_metrics,
    )


@pytest.fixture
def pipeline(uow_factory, storage, ingest_use_case, verify_use_case) -> DocumentPipeline:
    return DocumentPipeline(
        ingest_document=ingest_use_case,
        verify_document=verify_use_case,
        get_document=GetDocumentUseCase(unit_of_work_factory=uow_factory),
        delete_document=DeleteDocumentUseCase(unit_of_work_factory=uow_factory, storage=storage),
        expire_documents=ExpireStaleDocumentsUseCase(
            unit_of_work_factory=uow_factory,
            validity_window=timedelta(days=30),
        ),
    )
