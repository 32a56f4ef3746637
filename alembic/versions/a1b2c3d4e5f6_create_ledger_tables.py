"""create_ledger_tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-01-05 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1b2c3d4e5f6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'members',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('status', sa.String(length=8), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_members_last_name'), 'members', ['last_name'], unique=False)

    op.create_table(
        'periods',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('is_closed', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_periods_start_date'), 'periods', ['start_date'], unique=False)
    # At most one open period
    op.create_index(
        'uq_period_single_open',
        'periods',
        ['is_closed'],
        unique=True,
        postgresql_where=sa.text('is_closed = false'),
        sqlite_where=sa.text('is_closed = 0'),
    )

    op.create_table(
        'bulk_payment_batches',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('period_id', sa.Integer(), nullable=False),
        sa.Column('kind', sa.String(length=8), nullable=False),
        sa.Column('entry_count', sa.Integer(), nullable=False),
        sa.Column('total_amount', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('undone_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['period_id'], ['periods.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_bulk_payment_batches_period_id'), 'bulk_payment_batches', ['period_id'], unique=False)

    op.create_table(
        'ledger_entries',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('period_id', sa.Integer(), nullable=False),
        sa.Column('entry_type', sa.String(length=13), nullable=False),
        sa.Column('batch_id', sa.Integer(), nullable=True),
        sa.Column('lawas', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('put_up', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('hulam_put_up', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('hulam', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('interest', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('payment', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('penalty', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['member_id'], ['members.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['period_id'], ['periods.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['batch_id'], ['bulk_payment_batches.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_ledger_entries_member_id'), 'ledger_entries', ['member_id'], unique=False)
    op.create_index(op.f('ix_ledger_entries_period_id'), 'ledger_entries', ['period_id'], unique=False)
    op.create_index(op.f('ix_ledger_entries_batch_id'), 'ledger_entries', ['batch_id'], unique=False)
    op.create_index('idx_ledger_entry_member_created', 'ledger_entries', ['member_id', 'created_at', 'id'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_ledger_entry_member_created', table_name='ledger_entries')
    op.drop_index(op.f('ix_ledger_entries_batch_id'), table_name='ledger_entries')
    op.drop_index(op.f('ix_ledger_entries_period_id'), table_name='ledger_entries')
    op.drop_index(op.f('ix_ledger_entries_member_id'), table_name='ledger_entries')
    op.drop_table('ledger_entries')
    op.drop_index(op.f('ix_bulk_payment_batches_period_id'), table_name='bulk_payment_batches')
    op.drop_table('bulk_payment_batches')
    op.drop_index('uq_period_single_open', table_name='periods')
    op.drop_index(op.f('ix_periods_start_date'), table_name='periods')
    op.drop_table('periods')
    op.drop_index(op.f('ix_members_last_name'), table_name='members')
    op.drop_table('members')
