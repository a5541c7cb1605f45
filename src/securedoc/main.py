"""Application entry point and composition root."""

from datetime import timedelta

from psycopg_pool import AsyncConnectionPool

from securedoc import __version__
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
from securedoc.config import Settings, get_settings
from securedoc.infrastructure.crypto import AesGcmEncryptionEngine, LocalKeyring
from securedoc.infrastructure.persistence.postgres.connection import create_pool
from securedoc.infrastructure.persistence.postgres.unit_of_work import create_uow_factory
from securedoc.infrastructure.storage import (
    CircuitBreaker,
    ResilientStorageClient,
    S3ObjectStore,
)
from securedoc.infrastructure.verification.http_verification_service import (
    HttpVerificationService,
)
from securedoc.logging_setup import configure_logging
from securedoc.telemetry import PipelineMetrics, configure_metrics


def main() -> None:
    """CLI entry point."""
    print(f"SecureDoc v{__version__}")


def create_pipeline(
    settings: Settings | None = None,
) -> tuple[DocumentPipeline, AsyncConnectionPool]:
    """Composition root - wire the document pipeline from settings.

    Returns the pipeline and the connection pool; the caller opens the pool
    (``await pool.open()``) before use and closes it on shutdown.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)
    if settings.otel_exporter_endpoint:
        configure_metrics(settings.service_name, settings.otel_exporter_endpoint)
    metrics = PipelineMetrics()

    if not settings.encryption_key:
        raise ValueError("ENCRYPTION_KEY is not configured")

    pool = create_pool(settings.database_url)
    uow_factory = create_uow_factory(pool)

    keyring = LocalKeyring.from_base64(
        settings.encryption_key, settings.retired_encryption_keys
    )
    encryption_engine = AesGcmEncryptionEngine(keyring)

    breaker = CircuitBreaker(
        "object-store",
        failure_rate_threshold=settings.storage_failure_rate_threshold,
        window_seconds=settings.storage_window_seconds,
        minimum_calls=settings.storage_minimum_calls,
        reset_timeout=settings.storage_reset_timeout,
        call_timeout=settings.storage_call_timeout,
        metrics=metrics,
    )
    storage = ResilientStorageClient(
        S3ObjectStore(
            bucket=settings.s3_bucket,
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            access_key_id=settings.s3_access_key_id,
            secret_access_key=settings.s3_secret_access_key,
        ),
        breaker,
        metrics,
    )
    verification_service = HttpVerificationService(
        base_url=settings.verification_api_url,
        api_key=settings.verification_api_key,
        timeout=settings.verification_http_timeout,
    )
    retry_policy = RetryPolicy(
        base_delay=settings.verification_base_delay,
        factor=settings.verification_backoff_factor,
        max_delay=settings.verification_max_delay,
        max_attempts=settings.verification_max_attempts,
        retry_on=RETRYABLE_ERRORS,
    )
    validity_window = timedelta(days=settings.validity_window_days)

    pipeline = DocumentPipeline(
        ingest_document=IngestDocumentUseCase(
            unit_of_work_factory=uow_factory,
            encryption_engine=encryption_engine,
            storage=storage,
            max_file_size=settings.max_file_size,
            allowed_mime_types=settings.allowed_mime_types,
        ),
        verify_document=VerifyDocumentUseCase(
            unit_of_work_factory=uow_factory,
            storage=storage,
            encryption_engine=encryption_engine,
            verification_service=verification_service,
            retry_policy=retry_policy,
            confidence_threshold=settings.confidence_threshold,
            verification_timeout=settings.verification_timeout,
            validity_window=validity_window,
            metrics=metrics,
        ),
        get_document=GetDocumentUseCase(unit_of_work_factory=uow_factory),
        delete_document=DeleteDocumentUseCase(
            unit_of_work_factory=uow_factory,
            storage=storage,
        ),
        expire_documents=ExpireStaleDocumentsUseCase(
            unit_of_work_factory=uow_factory,
            validity_window=validity_window,
        ),
    )
    return pipeline, pool
