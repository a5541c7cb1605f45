"""HTTP client for the external document verification service."""

from datetime import UTC, datetime
from typing import Any

import httpx
import structlog

from securedoc.domain.exceptions import VerificationRequestError, VerificationServiceError
from securedoc.domain.value_objects import DocumentType, VerificationResult

logger = structlog.get_logger(__name__)


class HttpVerificationService:
    """Posts document bytes to ``{base_url}/v1/verify`` and parses the verdict.

    Transport errors, timeouts, 429 and 5xx responses and malformed bodies
    raise VerificationServiceError. Any other 4xx means the request itself was
    refused and raises VerificationRequestError, which is not retried.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def verify(self, data: bytes, document_type: DocumentType) -> VerificationResult:
        headers = {"Content-Type": "application/octet-stream"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                headers=headers,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    "/v1/verify",
                    content=data,
                    params={"document_type": str(document_type)},
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.error(
                "verification_service_error_status",
                status_code=status_code,
                document_type=str(document_type),
            )
            if status_code < 500 and status_code != 429:
                raise VerificationRequestError(
                    f"Verification service rejected the request with {status_code}"
                ) from exc
            raise VerificationServiceError(
                f"Verification service returned {status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(
                "verification_service_connection_error",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise VerificationServiceError(f"Verification service unreachable: {exc}") from exc
        except ValueError as exc:
            raise VerificationServiceError("Verification service returned invalid JSON") from exc

        return _parse_result(payload)


def _parse_result(payload: Any) -> VerificationResult:
    """Map the service's camelCase JSON body to a VerificationResult."""
    if not isinstance(payload, dict):
        raise VerificationServiceError("Verification response must be a JSON object")
    try:
        is_authentic = payload["isAuthentic"]
        confidence_score = payload["confidenceScore"]
        if not isinstance(is_authentic, bool):
            raise TypeError(f"isAuthentic must be a boolean, got {is_authentic!r}")
        if isinstance(confidence_score, bool) or not isinstance(confidence_score, (int, float)):
            raise TypeError(f"confidenceScore must be a number, got {confidence_score!r}")
        timestamp_raw = payload.get("verificationTimestamp")
        timestamp = (
            datetime.fromisoformat(timestamp_raw) if timestamp_raw else datetime.now(UTC)
        )
        return VerificationResult(
            is_authentic=is_authentic,
            confidence_score=float(confidence_score),
            issues=tuple(str(i) for i in payload.get("issues") or ()),
            verified_by=str(payload.get("verifiedBy") or "AI_SYSTEM"),
            verification_timestamp=timestamp,
            verification_method=str(payload.get("verificationMethod") or "AI_ML_MODEL"),
            metadata=dict(payload.get("metadata") or {}),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise VerificationServiceError(f"Malformed verification response: {exc}") from exc
