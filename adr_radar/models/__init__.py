"""ORM Models — SQLAlchemy declarative models for the relational index.

Invariants:
    - All models inherit from Base (db/base.py)
    - Blip and AdrLog are linked by value (adr_id, blip_name), not by foreign key

Design Decisions:
    - One file per table for locality
    - All models imported here so Base.metadata is complete before create_all
      or alembic autogenerate runs
"""

from adr_radar.models.blip import Blip  # noqa: F401
from adr_radar.models.adr_log import AdrLog  # noqa: F401
from adr_radar.models.app_setting import AppSetting  # noqa: F401
