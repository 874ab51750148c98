"""ADR classification and app settings — adr_log.quadrant/ring, app_settings.

Revision ID: 003_adr_classification_settings
Revises: 002_link_adrs_blips
Create Date: 2026-03-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "003_adr_classification_settings"
down_revision: Union[str, None] = "002_link_adrs_blips"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    with op.batch_alter_table("adr_log") as batch:
        batch.add_column(sa.Column("quadrant", sa.String(20), nullable=True))
        batch.add_column(sa.Column("ring", sa.String(20), nullable=True))

    op.create_table(
        "app_settings",
        sa.Column("key", sa.String(64), primary_key=True),
        sa.Column("value", sa.Text, nullable=False),
    )


def downgrade() -> None:
    op.drop_table("app_settings")
    with op.batch_alter_table("adr_log") as batch:
        batch.drop_column("ring")
        batch.drop_column("quadrant")
