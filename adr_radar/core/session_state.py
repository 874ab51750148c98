"""Session State — the single explicit structure behind the interactive session.

Invariants:
    - One SessionState value is the source of truth for "what screen is active"
    - wizard is set iff mode is a wizard mode; conflict is set iff mode is CONFIRM_DUPLICATE
    - While submitting is True no screen transition happens; quit/cancel keys
      are queued in pending_keys and replayed when the result arrives
    - blips/adrs are the last snapshot fetched from the store, ordered by id
    - search_query and adr_blip_filter only narrow what the list views show;
      selection indexes into shown_blips/shown_adrs, never the raw snapshot
    - Render and geometry only read this value; transitions return a new one

Design Decisions:
    - Frozen dataclasses: the render path cannot mutate state by accident, and
      transitions are testable as plain value comparisons (ADR: pure core)
    - Events and effects are small tagged dataclasses: the shell executes effects,
      the core never performs IO
"""

from dataclasses import dataclass, field
from enum import Enum

from adr_radar.core.domain_types import (
    BrowseView, EntryKind, Mode, SyncOutcome,
)
from adr_radar.core.errors import ErrorSeverity
from adr_radar.core.records import AdrRecord, BlipRecord, SyncRequest
from adr_radar.core.wizard import WizardState


SETTINGS_KEYS: tuple[str, ...] = ("ADR_DIR", "BLIP_DIR", "DATABASE_NAME")


# ─── Input Events ────────────────────────────────────────────────

class Key(str, Enum):
    CHAR = "char"
    ENTER = "enter"
    ESCAPE = "escape"
    BACKSPACE = "backspace"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    TAB = "tab"


@dataclass(frozen=True)
class KeyPress:
    key: Key
    char: str = ""

    @classmethod
    def of(cls, char: str) -> "KeyPress":
        return cls(Key.CHAR, char)


@dataclass(frozen=True)
class Tick:
    """Wall-clock tick, seconds since the epoch (or any monotonic origin)."""
    now: float


Event = KeyPress | Tick


# ─── Effects (executed by the shell) ─────────────────────────────

@dataclass(frozen=True)
class Submit:
    request: SyncRequest


@dataclass(frozen=True)
class Refresh:
    pass


@dataclass(frozen=True)
class RewriteDocument:
    kind: EntryKind
    record_id: int


@dataclass(frozen=True)
class RelinkAdr:
    adr_id: int


@dataclass(frozen=True)
class PersistSetting:
    key: str
    value: str


Effect = Submit | Refresh | RewriteDocument | RelinkAdr | PersistSetting


# ─── Sub-states ──────────────────────────────────────────────────

@dataclass(frozen=True)
class StatusMessage:
    text: str
    severity: ErrorSeverity = ErrorSeverity.INFO


@dataclass(frozen=True)
class DuplicateConflict:
    """Pending wizard whose identifier collided with an existing row."""
    wizard: WizardState
    identifier: str
    outcome: SyncOutcome


@dataclass(frozen=True)
class SettingsState:
    values: dict[str, str] = field(default_factory=dict)
    selection: int = 0
    editing: bool = False
    input: str = ""

    @property
    def selected_key(self) -> str:
        return SETTINGS_KEYS[self.selection]


@dataclass(frozen=True)
class SessionState:
    """Per-process session state: pure data, no IO."""

    mode: Mode = Mode.BROWSING
    view: BrowseView = BrowseView.BLIPS
    selected: int = 0

    wizard: WizardState | None = None
    conflict: DuplicateConflict | None = None
    settings: SettingsState = field(default_factory=SettingsState)
    status: StatusMessage | None = None

    # Snapshot last fetched from the record store
    blips: tuple[BlipRecord, ...] = ()
    adrs: tuple[AdrRecord, ...] = ()

    # List filters: "/" search over both lists, "v" narrows ADRs to one blip
    search_query: str = ""
    adr_blip_filter: str | None = None

    # In-flight Sync Protocol call
    submitting: bool = False
    pending_keys: tuple[KeyPress, ...] = ()

    # Radar clock
    started_at: float = 0.0
    now: float = 0.0
    animation_paused: bool = False
    paused_elapsed: float = 0.0

    @property
    def running(self) -> bool:
        return self.mode != Mode.EXIT

    @property
    def elapsed(self) -> float:
        if self.animation_paused:
            return self.paused_elapsed
        return max(0.0, self.now - self.started_at)

    @property
    def shown_blips(self) -> tuple[BlipRecord, ...]:
        if not self.search_query:
            return self.blips
        return tuple(
            b for b in self.blips
            if _matches(
                self.search_query, b.name, b.tag, b.description,
                b.quadrant.value if b.quadrant else None,
                b.ring.value if b.ring else None,
            )
        )

    @property
    def shown_adrs(self) -> tuple[AdrRecord, ...]:
        adrs = self.adrs
        if self.adr_blip_filter is not None:
            adrs = tuple(a for a in adrs if a.blip_name == self.adr_blip_filter)
        if self.search_query:
            adrs = tuple(
                a for a in adrs
                if _matches(self.search_query, a.title, a.blip_name, a.status)
            )
        return adrs

    @property
    def visible_rows(self) -> int:
        if self.view == BrowseView.ADRS:
            return len(self.shown_adrs)
        return len(self.shown_blips)

    @property
    def selected_blip(self) -> BlipRecord | None:
        blips = self.shown_blips
        if self.view == BrowseView.ADRS or not blips:
            return None
        return blips[min(self.selected, len(blips) - 1)]

    @property
    def selected_adr(self) -> AdrRecord | None:
        adrs = self.shown_adrs
        if self.view != BrowseView.ADRS or not adrs:
            return None
        return adrs[min(self.selected, len(adrs) - 1)]


def _matches(query: str, *values: str | None) -> bool:
    """Case-insensitive substring match against any non-empty value."""
    needle = query.strip().lower()
    return not needle or any(needle in value.lower() for value in values if value)
