"""PostgreSQL document repository implementation."""

from datetime import datetime
from typing import Any
from uuid import UUID

from psycopg import AsyncConnection
from psycopg.types.json import Jsonb

from securedoc.domain.entities import Document
from securedoc.domain.exceptions import NotFoundError, StaleDocumentError
from securedoc.domain.value_objects import (
    DocumentStatus,
    DocumentType,
    VerificationResult,
)

_COLUMNS = (
    "id, type, status, storage_key, content_hash, file_size, mime_type, file_name, "
    "uploaded_at, check_id, verification_result, verified_at, deleted_at, version"
)

_NON_TERMINAL = [DocumentStatus.PENDING.value, DocumentStatus.PROCESSING.value]


def _row_to_document(r: tuple[Any, ...]) -> Document:
    return Document(
        id=r[0],
        type=DocumentType(r[1]),
        status=DocumentStatus(r[2]),
        storage_key=r[3],
        content_hash=bytes(r[4]),
        file_size=r[5],
        mime_type=r[6],
        file_name=r[7],
        uploaded_at=r[8],
        check_id=r[9],
        verification_result=VerificationResult.from_dict(r[10]) if r[10] else None,
        verified_at=r[11],
        deleted_at=r[12],
        version=r[13],
    )


class PostgresDocumentRepository:
    """Document repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, document_id: UUID, include_deleted: bool = False) -> Document | None:
        """Get document by id."""
        q = f"SELECT {_COLUMNS} FROM document WHERE id = %s"
        if not include_deleted:
            q += " AND deleted_at IS NULL"
        cur = await self._conn.execute(q, (document_id,))
        r = await cur.fetchone()
        if not r:
            return None
        return _row_to_document(r)

    async def create(self, document: Document) -> Document:
        """Create document."""
        await self._conn.execute(
            f"INSERT INTO document ({_COLUMNS}) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                document.id,
                document.type.value,
                document.status.value,
                document.storage_key,
                document.content_hash,
                document.file_size,
                document.mime_type,
                document.file_name,
                document.uploaded_at,
                document.check_id,
                Jsonb(document.verification_result.to_dict())
                if document.verification_result
                else None,
                document.verified_at,
                document.deleted_at,
                document.version,
            ),
        )
        return document

    async def update_status(
        self,
        document_id: UUID,
        status: DocumentStatus,
        *,
        expected_version: int,
        verification_result: VerificationResult | None = None,
        verified_at: datetime | None = None,
    ) -> Document:
        """Apply status, result and timestamp in one statement, guarded by version."""
        cur = await self._conn.execute(
            "UPDATE document SET status = %s, verification_result = %s, verified_at = %s, "
            "version = version + 1 "
            "WHERE id = %s AND version = %s AND deleted_at IS NULL "
            f"RETURNING {_COLUMNS}",
            (
                status.value,
                Jsonb(verification_result.to_dict()) if verification_result else None,
                verified_at,
                document_id,
                expected_version,
            ),
        )
        r = await cur.fetchone()
        if r:
            return _row_to_document(r)
        if await self.get_by_id(document_id) is None:
            raise NotFoundError("Document", str(document_id))
        raise StaleDocumentError(
            f"Document {document_id} changed since version {expected_version}"
        )

    async def mark_deleted(self, document_id: UUID) -> None:
        """Soft delete document. No-op if already deleted."""
        await self._conn.execute(
            "UPDATE document SET deleted_at = NOW() WHERE id = %s AND deleted_at IS NULL",
            (document_id,),
        )

    async def list_stale(self, uploaded_before: datetime, limit: int = 100) -> list[Document]:
        """Non-terminal documents uploaded before the cutoff, oldest first."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM document "
            "WHERE status = ANY(%s) AND deleted_at IS NULL AND uploaded_at < %s "
            "ORDER BY uploaded_at LIMIT %s",
            (_NON_TERMINAL, uploaded_before, limit),
        )
        rows = await cur.fetchall()
        return [_row_to_document(r) for r in rows]
