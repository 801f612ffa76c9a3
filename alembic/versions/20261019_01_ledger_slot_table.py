"""Ledger slot table for snapshot persistence

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "ledger_slot",
        sa.Column("slot_name", sa.Text(), primary_key=True),
        sa.Column("last_edit_timestamp", sa.Text(), nullable=False),
        sa.Column("last_editor_id", sa.Text(), nullable=False),
        sa.Column("payload", sa.Text(), nullable=False),
        sa.Column("updated_at_utc", sa.Text(), nullable=False),
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_table("ledger_slot")
