"""Create documents table

Revision ID: 001_documents_table
Revises:
Create Date: 2026-10-19

Creates:
- documents table holding every collection of the conference store
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '001_documents_table'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """
    Create documents table.

    Documents are addressed by (collection, doc_id); the JSON body is
    JSONB on PostgreSQL and JSON elsewhere.
    """
    op.create_table(
        'documents',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('collection', sa.String(length=100), nullable=False),
        sa.Column('doc_id', sa.String(length=255), nullable=False),
        sa.Column(
            'data',
            sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql'),
            nullable=False,
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('collection', 'doc_id', name='uq_documents_collection_doc_id'),
    )
    op.create_index('ix_documents_collection', 'documents', ['collection'], unique=False)


def downgrade() -> None:
    """Drop documents table."""
    op.drop_index('ix_documents_collection', table_name='documents')
    op.drop_table('documents')
