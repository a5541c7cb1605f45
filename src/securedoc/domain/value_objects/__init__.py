"""Domain value objects."""

from securedoc.domain.value_objects.content_hash import ContentHash
from securedoc.domain.value_objects.document_status import DocumentStatus
from securedoc.domain.value_objects.document_type import DocumentType
from securedoc.domain.value_objects.encrypted_envelope import EncryptedEnvelope
from securedoc.domain.value_objects.verification_result import VerificationResult

__all__ = [
    "ContentHash",
    "DocumentStatus",
    "DocumentType",
    "EncryptedEnvelope",
    "VerificationResult",
]
