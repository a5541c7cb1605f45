"""Initial schema - document table.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "document",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("storage_key", sa.String(512), nullable=False),
        sa.Column("content_hash", sa.LargeBinary(), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("check_id", sa.String(255), nullable=True),
        sa.Column("verification_result", JSONB(), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.CheckConstraint("file_size > 0", name="ck_document_file_size_positive"),
        sa.CheckConstraint("octet_length(content_hash) = 32", name="ck_document_content_hash_len"),
    )
    op.create_index("ix_document_status_uploaded_at", "document", ["status", "uploaded_at"])
    op.create_index("ix_document_check_id", "document", ["check_id"])
    op.create_index("ix_document_storage_key", "document", ["storage_key"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_document_storage_key", table_name="document")
    op.drop_index("ix_document_check_id", table_name="document")
    op.drop_index("ix_document_status_uploaded_at", table_name="document")
    op.drop_table("document")
