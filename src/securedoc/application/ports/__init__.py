"""Application ports - interfaces for external adapters."""

from securedoc.application.ports.blob_storage import BlobStorage
from securedoc.application.ports.encryption_engine import EncryptionEngine
from securedoc.application.ports.key_provider import DataKey, KeyProvider
from securedoc.application.ports.object_store import ObjectStore
from securedoc.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory
from securedoc.application.ports.verification_service import VerificationService

__all__ = [
    "BlobStorage",
    "DataKey",
    "EncryptionEngine",
    "KeyProvider",
    "ObjectStore",
    "UnitOfWork",
    "UnitOfWorkFactory",
    "VerificationService",
]
