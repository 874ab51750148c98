"""Domain Types — identity types and closed vocabularies for blips and ADRs.

Invariants:
    - BlipId and AdrId are independent integer keys assigned by the store
    - Quadrant order is the clockwise sector order of the radar (Platforms first)
    - Ring order runs outermost to innermost (Hold first, Adopt last)
    - All stored values are lowercase; labels are for display only

Design Decisions:
    - NewType over wrapper classes: zero runtime cost, type-checker support
    - str Enums: values go straight into SQL columns, YAML front matter and JSON
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

BlipId = NewType("BlipId", int)
AdrId = NewType("AdrId", int)


# ─── Classification ──────────────────────────────────────────────

class Quadrant(str, Enum):
    """Radar sector. Declaration order is the clockwise drawing order."""
    PLATFORMS = "platforms"
    LANGUAGES = "languages"
    TOOLS = "tools"
    TECHNIQUES = "techniques"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def index(self) -> int:
        return list(Quadrant).index(self)

    @classmethod
    def parse(cls, value: str | None) -> "Quadrant | None":
        """Case-insensitive lookup; returns None for empty or unknown input."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class Ring(str, Enum):
    """Adoption ring. Hold is the outermost band, Adopt the innermost."""
    HOLD = "hold"
    ASSESS = "assess"
    TRIAL = "trial"
    ADOPT = "adopt"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def index(self) -> int:
        return list(Ring).index(self)

    @classmethod
    def parse(cls, value: str | None) -> "Ring | None":
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class AdrStatus(str, Enum):
    """Statuses offered by the ADR wizard. The store accepts any text."""
    PROPOSED = "proposed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    DEPRECATED = "deprecated"
    SUPERSEDED = "superseded"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class EntryKind(str, Enum):
    """The two artifact kinds. Selects the output directory and front matter."""
    ADR = "adr"
    BLIP = "blip"


# ─── Session Vocabulary ──────────────────────────────────────────

class Mode(str, Enum):
    """Top-level screen of the interactive session."""
    BROWSING = "browsing"
    NEW_BLIP_WIZARD = "new_blip_wizard"
    NEW_ADR_WIZARD = "new_adr_wizard"
    EDIT_WIZARD = "edit_wizard"
    SETTINGS = "settings"
    HELP = "help"
    CONFIRM_DUPLICATE = "confirm_duplicate"
    DETAILS = "details"
    SEARCH = "search"
    EXIT = "exit"


class BrowseView(str, Enum):
    """Panel shown while browsing. Tab cycles in declaration order."""
    BLIPS = "blips"
    ADRS = "adrs"
    RADAR = "radar"


class WizardField(str, Enum):
    """Every field a wizard step can capture."""
    NAME = "name"
    TITLE = "title"
    BLIP_NAME = "blip_name"
    STATUS = "status"
    QUADRANT = "quadrant"
    RING = "ring"
    TAG = "tag"
    DESCRIPTION = "description"
    CONTEXT = "context"
    DECISION = "decision"
    CONSEQUENCES = "consequences"
    REFERENCES = "references"


class SyncOutcome(str, Enum):
    """Result of one Sync Protocol call. Only CREATED/UPDATED are clean."""
    CREATED = "created"
    UPDATED = "updated"
    DUPLICATE_NAME = "duplicate_name"
    DUPLICATE_ADR = "duplicate_adr"
    PARTIAL_WRITE = "partial_write"
    ORPHAN_ADR = "orphan_adr"
    NOT_FOUND = "not_found"
    STORE_ERROR = "store_error"

    @property
    def is_conflict(self) -> bool:
        return self in (SyncOutcome.DUPLICATE_NAME, SyncOutcome.DUPLICATE_ADR)
