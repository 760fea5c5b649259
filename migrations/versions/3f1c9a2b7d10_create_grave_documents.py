"""Create grave_documents table for the remote record store

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2025-11-02 10:00:00.000000

"""
import sqlalchemy as sa
from alembic import op

from cemetery_app.database.models import UUID


# revision identifiers, used by Alembic.
revision = '3f1c9a2b7d10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'grave_documents',
        sa.Column('id', UUID(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_grave_documents_created_at', 'grave_documents', ['created_at'], unique=False)


def downgrade():
    op.drop_index('idx_grave_documents_created_at', table_name='grave_documents')
    op.drop_table('grave_documents')
