"""AppSetting ORM — key/value pairs saved from the Settings screen.

Invariants:
    - key is the primary key; writing an existing key replaces its value
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from adr_radar.db.base import Base


class AppSetting(Base):
    __tablename__ = "app_settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
