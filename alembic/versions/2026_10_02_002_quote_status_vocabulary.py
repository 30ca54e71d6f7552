"""Unify quote status vocabulary

Rewrites the legacy lowercase statuses (draft, sent, accepted, rejected,
expired) to DRAFT, OPEN, APPROVED, REJECTED, EXPIRED and, on PostgreSQL,
turns the status columns into the quotestatus enum.

Revision ID: 002_quote_status_vocabulary
Revises: 001_initial_schema
Create Date: 2026-10-02

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '002_quote_status_vocabulary'
down_revision = '001_initial_schema'

LEGACY_TO_CANONICAL = {
    'draft': 'DRAFT',
    'sent': 'OPEN',
    'accepted': 'APPROVED',
    'rejected': 'REJECTED',
    'expired': 'EXPIRED',
}
CANONICAL = ('DRAFT', 'OPEN', 'APPROVED', 'REJECTED', 'EXPIRED', 'INVOICED')

quote_status = sa.Enum(*CANONICAL, name='quotestatus')

STATUS_COLUMNS = (
    ('quotes', 'status'),
    ('quote_status_history', 'from_status'),
    ('quote_status_history', 'to_status'),
)


def _rewrite(mapping):
    for table, column in STATUS_COLUMNS:
        for old, new in mapping.items():
            op.execute(
                sa.text(f'UPDATE {table} SET {column} = :new WHERE {column} = :old').bindparams(old=old, new=new)
            )


def upgrade():
    _rewrite(LEGACY_TO_CANONICAL)
    # Lowercase spellings of canonical values
    _rewrite({value.lower(): value for value in CANONICAL if value.lower() not in LEGACY_TO_CANONICAL})

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        quote_status.create(bind, checkfirst=True)
        op.alter_column('quotes', 'status', server_default=None)
        for table, column in STATUS_COLUMNS:
            op.execute(
                f'ALTER TABLE {table} ALTER COLUMN {column} TYPE quotestatus USING {column}::quotestatus'
            )
        op.alter_column('quotes', 'status', server_default='DRAFT')
    else:
        op.alter_column('quotes', 'status', server_default='DRAFT')


def downgrade():
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        op.alter_column('quotes', 'status', server_default=None)
        for table, column in STATUS_COLUMNS:
            op.execute(f'ALTER TABLE {table} ALTER COLUMN {column} TYPE VARCHAR(20) USING {column}::text')
        quote_status.drop(bind, checkfirst=True)
    op.alter_column('quotes', 'status', server_default='draft')
    _rewrite({new: old for old, new in LEGACY_TO_CANONICAL.items()})
