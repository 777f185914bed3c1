"""Initial ledger schema

Revision ID: 001_ledger
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '001_ledger'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACCOUNT_TYPES = ('asset', 'liability', 'equity', 'revenue', 'expense')
CODE_KINDS = ('group', 'general', 'specific')
JOURNAL_STATUSES = ('draft', 'posted')
SOURCE_MODULES = ('manual', 'reversal', 'treasury', 'invoice', 'inventory', 'system')


def upgrade() -> None:
    # Chart of codes
    op.create_table(
        'codes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('code', sa.String(32), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('kind', sa.Enum(*CODE_KINDS, name='codekind', native_enum=False, length=20), nullable=False),
        sa.Column('parent_id', sa.Uuid(), sa.ForeignKey('codes.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('nature', sa.Integer(), nullable=True),
        sa.Column('category', sa.Enum(*ACCOUNT_TYPES, name='accounttype', native_enum=False, length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
        sa.CheckConstraint('nature IS NULL OR nature IN (0, 1)', name='check_code_nature'),
    )
    op.create_index('idx_codes_parent', 'codes', ['parent_id'])

    # Fiscal years
    op.create_table(
        'fiscal_years',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('is_closed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('start_date < end_date', name='check_fiscal_year_range'),
    )

    # Journals
    op.create_table(
        'journals',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('fiscal_year_id', sa.Uuid(), sa.ForeignKey('fiscal_years.id'), nullable=False),
        sa.Column('ref_no', sa.String(100), nullable=True),
        sa.Column('serial_no', sa.BigInteger(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('status', sa.Enum(*JOURNAL_STATUSES, name='journalstatus', native_enum=False, length=20), nullable=False, server_default='draft'),
        sa.Column('source_module', sa.Enum(*SOURCE_MODULES, name='sourcemodule', native_enum=False, length=20), nullable=False, server_default='manual'),
        sa.Column('source_id', sa.Uuid(), nullable=True),
        sa.Column('reversal_of_id', sa.Uuid(), sa.ForeignKey('journals.id'), nullable=True),
        sa.Column('reversed_by_id', sa.Uuid(), sa.ForeignKey('journals.id'), nullable=True),
        sa.Column('posted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('serial_no'),
    )
    op.create_index('idx_journals_fiscal_year_date', 'journals', ['fiscal_year_id', 'date'])
    op.create_index('uniq_journals_fiscal_ref', 'journals', ['fiscal_year_id', 'ref_no'], unique=True)

    # Journal items
    op.create_table(
        'journal_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('journal_id', sa.Uuid(), sa.ForeignKey('journals.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('code_id', sa.Uuid(), sa.ForeignKey('codes.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('party_id', sa.Uuid(), nullable=True),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('debit', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('credit', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('debit >= 0', name='check_debit_non_negative'),
        sa.CheckConstraint('credit >= 0', name='check_credit_non_negative'),
    )
    op.create_index('idx_journal_items_code', 'journal_items', ['code_id'])

    # Serial counter
    op.create_table(
        'journal_sequences',
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('value', sa.BigInteger(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('name'),
    )
    op.execute("INSERT INTO journal_sequences (name, value) VALUES ('journal_serial', 0)")


def downgrade() -> None:
    op.drop_table('journal_sequences')
    op.drop_index('idx_journal_items_code', table_name='journal_items')
    op.drop_table('journal_items')
    op.drop_index('uniq_journals_fiscal_ref', table_name='journals')
    op.drop_index('idx_journals_fiscal_year_date', table_name='journals')
    op.drop_table('journals')
    op.drop_table('fiscal_years')
    op.drop_index('idx_codes_parent', table_name='codes')
    op.drop_table('codes')
