"""Blip ORM — one Tech Radar entry.

Invariants:
    - id is an autoincrement integer, never reused or changed
    - name is non-nullable and UNIQUE
    - hasAdr == (adr_id IS NOT NULL); the record store keeps both in one UPDATE
    - ring/quadrant store lowercase enum values, NULL until classified

Design Decisions:
    - adr_id is a plain integer, not a foreign key: the link is a weak back-reference
      and removing an ADR must never cascade into the radar
    - Column name "hasAdr" kept camelCase for compatibility with existing databases
    - created stored as ISO text: it is also the front matter `date`
"""

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from adr_radar.db.base import Base


class Blip(Base):
    """Radar blip row."""
    __tablename__ = "blip"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    ring: Mapped[str | None] = mapped_column(String(20), nullable=True)
    quadrant: Mapped[str | None] = mapped_column(String(20), nullable=True)
    tag: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created: Mapped[str] = mapped_column(String(32), nullable=False)
    has_adr: Mapped[bool] = mapped_column(
        "hasAdr", Boolean, nullable=False, default=False, server_default="0",
    )
    adr_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
