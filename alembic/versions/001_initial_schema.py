"""Initial schema — blip and adr_log.

Revision ID: 001_initial
Revises: None
Create Date: 2026-03-02

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "blip",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False, unique=True),
        sa.Column("ring", sa.String(20), nullable=True),
        sa.Column("quadrant", sa.String(20), nullable=True),
        sa.Column("tag", sa.Text, nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("created", sa.String(32), nullable=False),
        sa.Column("hasAdr", sa.Boolean, nullable=False, server_default="0"),
    )

    op.create_table(
        "adr_log",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("timestamp", sa.String(32), nullable=False),
        sa.UniqueConstraint(
            "title", "timestamp", name="adr_log_title_timestamp_unique",
        ),
    )


def downgrade() -> None:
    op.drop_table("adr_log")
    op.drop_table("blip")
