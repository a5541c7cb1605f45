"""Outcome reported by the external verification service."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class VerificationResult:
    """Authenticity verdict for a document."""

    is_authentic: bool
    confidence_score: float
    issues: tuple[str, ...]
    verified_by: str
    verification_timestamp: datetime
    verification_method: str = "EXTERNAL_SERVICE"
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence_score <= 1.0:
            raise ValueError("confidence_score must be between 0.0 and 1.0")

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_authentic": self.is_authentic,
            "confidence_score": self.confidence_score,
            "issues": list(self.issues),
            "verified_by": self.verified_by,
            "verification_timestamp": self.verification_timestamp.isoformat(),
            "verification_method": self.verification_method,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VerificationResult":
        return cls(
            is_authentic=bool(data["is_authentic"]),
            confidence_score=float(data["confidence_score"]),
            issues=tuple(data.get("issues", ())),
            verified_by=data["verified_by"],
            verification_timestamp=datetime.fromisoformat(data["verification_timestamp"]),
            verification_method=data.get("verification_method", "EXTERNAL_SERVICE"),
            metadata=dict(data.get("metadata") or {}),
        )
