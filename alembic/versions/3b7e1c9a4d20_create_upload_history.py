"""create upload history

Revision ID: 3b7e1c9a4d20
Revises:
Create Date: 2026-10-19 09:12:44.518301

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b7e1c9a4d20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'upload_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('file_hash', sa.String(length=64), nullable=False),
        sa.Column('original_filename', sa.String(length=255), nullable=False),
        sa.Column('data_source', sa.String(length=50), nullable=False),
        sa.Column('table_name', sa.String(length=100), nullable=False),
        sa.Column('rows_inserted', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('upload_date', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_upload_history_id'), 'upload_history', ['id'], unique=False)

    # Lookups by hash and source for duplicate detection, by date for the history list
    op.create_index('idx_upload_history_file_hash', 'upload_history', ['file_hash'], unique=False)
    op.create_index('idx_upload_history_data_source', 'upload_history', ['data_source'], unique=False)
    op.create_index('idx_upload_history_upload_date', 'upload_history', ['upload_date'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_upload_history_upload_date', table_name='upload_history')
    op.drop_index('idx_upload_history_data_source', table_name='upload_history')
    op.drop_index('idx_upload_history_file_hash', table_name='upload_history')
    op.drop_index(op.f('ix_upload_history_id'), table_name='upload_history')
    op.drop_table('upload_history')
