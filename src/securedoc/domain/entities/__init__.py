"""Domain entities."""

from securedoc.domain.entities.document import Document

__all__ = [
    "Document",
]
