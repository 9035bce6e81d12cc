"""Create works, passes and play tables

Revision ID: 001_royalty_engine_schema
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, JSONB, DECIMAL


# revision identifiers, used by Alembic.
revision: str = '001_royalty_engine_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create royalty engine tables and indexes"""

    # Works and their split models
    op.create_table(
        'works',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('content_category', sa.String(30), nullable=False, server_default='loop'),
        sa.Column('is_draft', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('is_deleted', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('uploader_identity', sa.String(255), nullable=False),

        # Lineage
        sa.Column('source_work_ids', JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('remix_depth', sa.Integer, nullable=False, server_default='0'),
        sa.Column('remixer_stake_percentage', sa.Integer, nullable=False, server_default='0'),

        # Split slots
        sa.Column('composition_splits', JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('production_splits', JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),

        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # Listening passes
    op.create_table(
        'passes',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('payer_identity', sa.String(255), nullable=False),
        sa.Column('purchased_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('amount', DECIMAL(12, 6), nullable=False),
        sa.Column('tx_reference', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("status IN ('active', 'expired', 'distributed')", name='ck_passes_status'),
    )

    # Paid plays, insert-only
    op.create_table(
        'pass_plays',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('pass_id', UUID(as_uuid=True), sa.ForeignKey('passes.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('work_id', UUID(as_uuid=True), nullable=False),
        sa.Column('content_category', sa.String(30), nullable=False),
        sa.Column('credits', sa.Integer, nullable=False),
        sa.Column('duration_seconds', sa.Integer, nullable=True),
        sa.Column('globe_location', sa.Integer, nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('credits > 0', name='ck_pass_plays_credits_positive'),
    )

    # Preview analytics, never paid out
    op.create_table(
        'preview_plays',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('work_id', UUID(as_uuid=True), nullable=False),
        sa.Column('content_category', sa.String(30), nullable=False),
        sa.Column('listener_identity', sa.String(255), nullable=True),
        sa.Column('globe_location', sa.Integer, nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_index('ix_works_uploader', 'works', ['uploader_identity'])
    op.create_index('ix_works_uploader_deleted', 'works', ['uploader_identity', 'is_deleted'])
    op.create_index('ix_passes_payer_status', 'passes', ['payer_identity', 'status'])
    op.create_index('ix_passes_expires_at', 'passes', ['expires_at'])
    op.create_index('ix_pass_plays_pass_id', 'pass_plays', ['pass_id'])
    op.create_index('ix_pass_plays_work_id', 'pass_plays', ['work_id'])
    op.create_index('ix_preview_plays_work_id', 'preview_plays', ['work_id'])
    op.create_index('ix_preview_plays_created', 'preview_plays', ['created_at'])


def downgrade() -> None:
    """Drop royalty engine tables"""
    op.drop_index('ix_preview_plays_created', table_name='preview_plays')
    op.drop_index('ix_preview_plays_work_id', table_name='preview_plays')
    op.drop_index('ix_pass_plays_work_id', table_name='pass_plays')
    op.drop_index('ix_pass_plays_pass_id', table_name='pass_plays')
    op.drop_index('ix_passes_expires_at', table_name='passes')
    op.drop_index('ix_passes_payer_status', table_name='passes')
    op.drop_index('ix_works_uploader_deleted', table_name='works')
    op.drop_index('ix_works_uploader', table_name='works')

    op.drop_table('preview_plays')
    op.drop_table('pass_plays')
    op.drop_table('passes')
    op.drop_table('works')
