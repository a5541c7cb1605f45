"""Document type enumeration."""

from enum import StrEnum


class DocumentType(StrEnum):
    """Category of an uploaded document."""

    GOVERNMENT_ID = "GOVERNMENT_ID"
    PROOF_OF_ADDRESS = "PROOF_OF_ADDRESS"
    EMPLOYMENT_RECORD = "EMPLOYMENT_RECORD"
    EDUCATION_CERTIFICATE = "EDUCATION_CERTIFICATE"
    PROFESSIONAL_LICENSE = "PROFESSIONAL_LICENSE"
    BACKGROUND_CHECK_CONSENT = "BACKGROUND_CHECK_CONSENT"
