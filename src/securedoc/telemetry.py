"""OpenTelemetry metrics for storage, the circuit breaker and verification."""

import structlog
from opentelemetry import metrics
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.metrics import Meter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, Resource

METER_NAME = "securedoc"

logger = structlog.get_logger(__name__)


def configure_metrics(service_name: str, endpoint: str) -> MeterProvider:
    """Install a global MeterProvider exporting over OTLP/HTTP to ``endpoint``."""
    resource = Resource(attributes={SERVICE_NAME: service_name})
    exporter = OTLPMetricExporter(endpoint=f"{endpoint}/v1/metrics")
    reader = PeriodicExportingMetricReader(exporter)
    provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(provider)
    logger.info("metrics_configured", service=service_name, endpoint=endpoint)
    return provider


class PipelineMetrics:
    """Instruments shared by the storage client, breaker and verify use case.

    Without a configured provider the global meter is a no-op.
    """

    def __init__(self, meter: Meter | None = None) -> None:
        meter = meter or metrics.get_meter(METER_NAME)
        self.storage_operations = meter.create_counter(
            "storage_operations_total",
            description="Object store operations by operation and outcome",
            unit="1",
        )
        self.storage_duration = meter.create_histogram(
            "storage_operation_duration_seconds",
            description="Duration of object store operations",
            unit="s",
        )
        self.breaker_transitions = meter.create_counter(
            "circuit_breaker_transitions_total",
            description="Circuit breaker state changes",
            unit="1",
        )
        self.verifications = meter.create_counter(
            "verifications_total",
            description="Completed verifications by final status and document type",
            unit="1",
        )
        self.verification_attempts = meter.create_histogram(
            "verification_attempts",
            description="Attempts used per verification",
            unit="1",
        )
        self.verification_duration = meter.create_histogram(
            "verification_duration_seconds",
            description="Wall-clock duration of a verification",
            unit="s",
        )

    def record_storage(self, operation: str, outcome: str, duration: float) -> None:
        attributes = {"operation": operation, "outcome": outcome}
        self.storage_operations.add(1, attributes)
        self.storage_duration.record(duration, attributes)

    def record_transition(self, breaker: str, previous: str, state: str) -> None:
        self.breaker_transitions.add(1, {"breaker": breaker, "from": previous, "to": state})

    def record_verification(
        self, status: str, document_type: str, attempts: int, duration: float
    ) -> None:
        attributes = {"status": status, "document_type": document_type}
        self.verifications.add(1, attributes)
        self.verification_attempts.record(attempts, {"status": status})
        self.verification_duration.record(duration, {"status": status})
