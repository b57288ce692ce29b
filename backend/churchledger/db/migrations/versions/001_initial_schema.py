"""Initial ChurchLedger schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the tenancy tables (users, churches, church_memberships), the member
registry and the ledger tables (transactions, tithe_records).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'churches',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False, index=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('currency', sa.String(3), nullable=False, server_default='BRL'),
        *_timestamps(),
    )

    op.create_table(
        'church_memberships',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('church_id', sa.String(15), sa.ForeignKey('churches.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', sa.String(15), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('role', sa.Enum('owner', 'admin', 'treasurer', 'viewer', name='churchrole'), nullable=False, server_default='viewer', index=True),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('church_id', 'user_id', name='uq_church_memberships_church_user'),
    )

    op.create_table(
        'members',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('church_id', sa.String(15), sa.ForeignKey('churches.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('role', sa.String(100), nullable=True),
        sa.Column('profession', sa.String(100), nullable=True),
        sa.Column('marital_status', sa.String(50), nullable=True),
        sa.Column('gender', sa.String(50), nullable=True),
        sa.Column('is_tither', sa.Boolean(), nullable=True, server_default=sa.false(), index=True),
        sa.Column('is_baptized', sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'transactions',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('church_id', sa.String(15), sa.ForeignKey('churches.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('tipo', sa.Enum('entrada', 'saida', name='transactionkind', create_constraint=True), nullable=False, index=True),
        sa.Column('amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('settled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('category', sa.String(200), nullable=False, index=True),
        sa.Column('member_id', sa.String(15), nullable=True, index=True),
        sa.Column('member_name', sa.String(200), nullable=True),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('main_category', sa.String(200), nullable=True),
        sa.Column('sub_category', sa.String(200), nullable=True),
        sa.Column('idempotency_key', sa.String(100), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_by_id', sa.String(15), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('church_id', 'idempotency_key', name='uq_transactions_church_idempotency_key'),
    )

    op.create_table(
        'tithe_records',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('church_id', sa.String(15), sa.ForeignKey('churches.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('member_id', sa.String(15), nullable=False, index=True),
        sa.Column('transaction_id', sa.String(15), nullable=False, index=True),
        sa.Column('amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table('tithe_records')
    op.drop_table('transactions')
    op.drop_table('members')
    op.drop_table('church_memberships')
    op.drop_table('churches')
    op.drop_table('users')
    op.execute('DROP TYPE IF EXISTS transactionkind')
    op.execute('DROP TYPE IF EXISTS churchrole')
