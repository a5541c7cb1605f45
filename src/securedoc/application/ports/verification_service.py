"""Verification service port - external authenticity check (ML/AI)."""

from typing import Protocol

from securedoc.domain.value_objects import DocumentType, VerificationResult


class VerificationService(Protocol):
    """Port for the external verification service.

    Implementations raise VerificationServiceError when the call fails.
    """

    async def verify(self, data: bytes, document_type: DocumentType) -> VerificationResult: ...
