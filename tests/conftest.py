"""Root conftest — shared test configuration."""

import os

# Ensure tests never touch a real database or document tree
os.environ.setdefault(
    "ADR_RADAR_DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)
os.environ.setdefault("ADR_RADAR_ADR_DIR", "test-adrs")
os.environ.setdefault("ADR_RADAR_BLIP_DIR", "test-blips")
