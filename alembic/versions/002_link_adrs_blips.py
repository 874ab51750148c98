"""Link ADRs to blips — adr_log.blip_name/status, blip.adr_id.

Revision ID: 002_link_adrs_blips
Revises: 001_initial
Create Date: 2026-03-09

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002_link_adrs_blips"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    with op.batch_alter_table("adr_log") as batch:
        batch.add_column(
            sa.Column("blip_name", sa.Text, nullable=False, server_default=""),
        )
        batch.add_column(
            sa.Column(
                "status", sa.String(32), nullable=False, server_default="proposed",
            ),
        )
    with op.batch_alter_table("blip") as batch:
        batch.add_column(sa.Column("adr_id", sa.Integer, nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("blip") as batch:
        batch.drop_column("adr_id")
    with op.batch_alter_table("adr_log") as batch:
        batch.drop_column("status")
        batch.drop_column("blip_name")
