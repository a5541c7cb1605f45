"""Domain exceptions."""

from uuid import UUID


class SecureDocError(Exception):
    """Base exception for SecureDoc."""

    pass


class ValidationError(SecureDocError):
    """Ingest input is malformed (empty, oversized, unknown type)."""

    def __init__(self, message: str, errors: list[dict[str, str]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(SecureDocError):
    """Requested resource was not found."""

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(f"{resource} not found: {identifier}")
        self.resource = resource
        self.identifier = identifier


class IntegrityError(SecureDocError):
    """Decrypted content does not match the digest recorded at ingest."""

    pass


class DecryptionError(SecureDocError):
    """Authentication tag did not verify or the key version is unresolvable."""

    pass


class KeyNotFoundError(SecureDocError):
    """Key provider has no key material for the requested version."""

    pass


class StorageUnavailableError(SecureDocError):
    """Object store is unreachable, timed out, or its circuit is open."""

    pass


class VerificationServiceError(SecureDocError):
    """External verification service call failed."""

    pass


class StaleDocumentError(SecureDocError):
    """Document was modified concurrently; the update was not applied."""

    pass


class InternalError(SecureDocError):
    """Unexpected failure."""

    pass


class VerificationFailedError(SecureDocError):
    """Verification of a document failed terminally."""

    def __init__(self, document_id: UUID) -> None:
        super().__init__(f"Document verification failed: {document_id}")
        self.document_id = document_id


class VerificationRequestError(SecureDocError):
    """Verification service refused the request (4xx other than 429); not retried."""

    pass
