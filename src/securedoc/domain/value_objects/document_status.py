"""Document lifecycle status."""

from enum import StrEnum


class DocumentStatus(StrEnum):
    """Verification lifecycle state of a document."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"
    ERROR = "ERROR"
    MANUAL_REVIEW_REQUIRED = "MANUAL_REVIEW_REQUIRED"
    EXPIRED = "EXPIRED"

    @property
    def is_terminal(self) -> bool:
        """No transition is defined out of a terminal state."""
        return self not in (DocumentStatus.PENDING, DocumentStatus.PROCESSING)
