"""Create world_state table

Revision ID: 001
Revises:
Create Date: 2026-10-19

WHAT: Creates the key/value table backing the SQL state store.

HOW: Binary primary key so composite index keys (which embed 0x00
delimiters) are stored intact and range-scanned in byte order.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create world_state table.

    Certificate records and their degree index entries share this table.
    """
    op.create_table(
        'world_state',
        sa.Column('key', sa.LargeBinary(), nullable=False),
        sa.Column('value', sa.LargeBinary(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('key'),
    )


def downgrade() -> None:
    """Drop world_state table."""
    op.drop_table('world_state')
