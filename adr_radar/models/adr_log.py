"""AdrLog ORM — index row for one Architectural Decision Record.

Invariants:
    - (title, timestamp) is unique
    - blip_name is non-nullable: every ADR names the blip it justifies
    - Body sections are NOT stored here; the Markdown document holds them

Design Decisions:
    - quadrant/ring added as nullable columns (additive evolution, migration 003)
    - status is free text: the wizard offers a fixed set, the index accepts any value
"""

from sqlalchemy import Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from adr_radar.db.base import Base


class AdrLog(Base):
    """ADR index row."""
    __tablename__ = "adr_log"
    __table_args__ = (
        UniqueConstraint(
            "title", "timestamp", name="adr_log_title_timestamp_unique",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    blip_name: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="proposed", server_default="proposed",
    )
    timestamp: Mapped[str] = mapped_column(String(32), nullable=False)
    quadrant: Mapped[str | None] = mapped_column(String(20), nullable=True)
    ring: Mapped[str | None] = mapped_column(String(20), nullable=True)
