"""Entry Wizard — step sequences, field validation and buffer handling for record entry.

Invariants:
    - Each flow has a fixed, ordered step sequence (WIZARD_STEPS)
    - A step only advances after its own field validates
    - Choice steps can only yield a member of their fixed set
    - Name, title and blip name are never empty once captured
    - Every function here is PURE: it returns a new WizardState, never mutates

Design Decisions:
    - One WizardState dataclass tagged by flow, not a class per screen (ADR: the
      transition function stays exhaustively matchable and easy to unit test)
    - Values buffered as strings: choice steps store the enum value, text steps the
      stripped text; build_request() converts once at the end
"""

from dataclasses import dataclass, field, replace
from enum import Enum

from adr_radar.core.domain_types import (
    AdrStatus, EntryKind, Quadrant, Ring, WizardField,
)
from adr_radar.core.errors import WizardValidationError
from adr_radar.core.records import AdrDraft, BlipDraft, SyncRequest


class WizardFlow(str, Enum):
    NEW_BLIP = "new_blip"
    NEW_ADR = "new_adr"
    EDIT_BLIP = "edit_blip"
    EDIT_ADR = "edit_adr"

    @property
    def kind(self) -> EntryKind:
        if self in (WizardFlow.NEW_BLIP, WizardFlow.EDIT_BLIP):
            return EntryKind.BLIP
        return EntryKind.ADR

    @property
    def is_edit(self) -> bool:
        return self in (WizardFlow.EDIT_BLIP, WizardFlow.EDIT_ADR)


_BLIP_STEPS = (
    WizardField.NAME, WizardField.QUADRANT, WizardField.RING,
    WizardField.TAG, WizardField.DESCRIPTION,
)

WIZARD_STEPS: dict[WizardFlow, tuple[WizardField, ...]] = {
    WizardFlow.NEW_BLIP: _BLIP_STEPS,
    WizardFlow.EDIT_BLIP: _BLIP_STEPS,
    WizardFlow.NEW_ADR: (
        WizardField.TITLE, WizardField.BLIP_NAME, WizardField.STATUS,
        WizardField.QUADRANT, WizardField.RING, WizardField.CONTEXT,
        WizardField.DECISION, WizardField.CONSEQUENCES, WizardField.REFERENCES,
    ),
    # Body sections live in the document; editing them happens in the file itself
    WizardFlow.EDIT_ADR: (
        WizardField.TITLE, WizardField.BLIP_NAME, WizardField.STATUS,
        WizardField.QUADRANT, WizardField.RING,
    ),
}

CHOICES: dict[WizardField, tuple[str, ...]] = {
    WizardField.QUADRANT: tuple(q.value for q in Quadrant),
    WizardField.RING: tuple(r.value for r in Ring),
    WizardField.STATUS: tuple(s.value for s in AdrStatus),
}

REQUIRED_TEXT: frozenset[WizardField] = frozenset({
    WizardField.NAME, WizardField.TITLE, WizardField.BLIP_NAME,
})

# Step that captures the conflicting identifier, per entry kind
IDENTIFIER_FIELD: dict[EntryKind, WizardField] = {
    EntryKind.BLIP: WizardField.NAME,
    EntryKind.ADR: WizardField.TITLE,
}

PROMPTS: dict[WizardField, str] = {
    WizardField.NAME: "Technology name",
    WizardField.TITLE: "Decision title",
    WizardField.BLIP_NAME: "Blip this ADR justifies",
    WizardField.STATUS: "Status",
    WizardField.QUADRANT: "Quadrant",
    WizardField.RING: "Ring",
    WizardField.TAG: "Tag (optional)",
    WizardField.DESCRIPTION: "Description (optional)",
    WizardField.CONTEXT: "Context (optional)",
    WizardField.DECISION: "Decision (optional)",
    WizardField.CONSEQUENCES: "Consequences (optional)",
    WizardField.REFERENCES: "References (optional)",
}


@dataclass(frozen=True)
class WizardState:
    """In-progress entry: flow tag, step index and field buffer."""
    flow: WizardFlow
    step: int = 0
    values: dict[str, str] = field(default_factory=dict)
    text: str = ""
    cursor: int = 0
    target_id: int | None = None

    @property
    def steps(self) -> tuple[WizardField, ...]:
        return WIZARD_STEPS[self.flow]

    @property
    def current_field(self) -> WizardField:
        return self.steps[self.step]

    @property
    def is_choice(self) -> bool:
        return self.current_field in CHOICES

    @property
    def is_last_step(self) -> bool:
        return self.step == len(self.steps) - 1

    @property
    def choices(self) -> tuple[str, ...]:
        return CHOICES.get(self.current_field, ())

    @property
    def identifier(self) -> str:
        return self.values.get(IDENTIFIER_FIELD[self.flow.kind].value, "")


# ─── Field Validation ────────────────────────────────────────────

def validate_text(wizard_field: WizardField, raw: str) -> str:
    """Strip and check a text field. Raises WizardValidationError."""
    value = raw.strip()
    if wizard_field in REQUIRED_TEXT and not value:
        raise WizardValidationError(
            f"{PROMPTS[wizard_field]} cannot be empty", wizard_field.value,
        )
    return value


def validate_choice(wizard_field: WizardField, index: int) -> str:
    options = CHOICES[wizard_field]
    if not 0 <= index < len(options):
        raise WizardValidationError(
            f"Invalid {wizard_field.value} selection", wizard_field.value,
        )
    return options[index]


# ─── Buffer Operations ───────────────────────────────────────────

def _load_step(state: WizardState, step: int) -> WizardState:
    """Position on a step, pre-filling input from the buffer."""
    wizard_field = WIZARD_STEPS[state.flow][step]
    current = state.values.get(wizard_field.value, "")
    cursor = 0
    if wizard_field in CHOICES and current in CHOICES[wizard_field]:
        cursor = CHOICES[wizard_field].index(current)
    text = "" if wizard_field in CHOICES else current
    return replace(state, step=step, text=text, cursor=cursor)


def start_wizard(
    flow: WizardFlow,
    initial: dict[str, str] | None = None,
    target_id: int | None = None,
) -> WizardState:
    state = WizardState(flow=flow, values=dict(initial or {}), target_id=target_id)
    return _load_step(state, 0)


def type_char(state: WizardState, char: str) -> WizardState:
    if state.is_choice:
        return state
    return replace(state, text=state.text + char)


def backspace(state: WizardState) -> WizardState:
    if state.is_choice or not state.text:
        return state
    return replace(state, text=state.text[:-1])


def move_cursor(state: WizardState, delta: int) -> WizardState:
    if not state.is_choice:
        return state
    return replace(state, cursor=(state.cursor + delta) % len(state.choices))


def with_values(state: WizardState, **values: str) -> WizardState:
    return replace(state, values={**state.values, **values})


def confirm_step(state: WizardState) -> tuple[WizardState, bool]:
    """Validate the current step and advance.

    Returns (new_state, completed). completed is True when the last step was
    confirmed; the state then stays on the last step with the full buffer.
    Raises WizardValidationError when the field is rejected.
    """
    wizard_field = state.current_field
    if state.is_choice:
        value = validate_choice(wizard_field, state.cursor)
    else:
        value = validate_text(wizard_field, state.text)
    state = with_values(state, **{wizard_field.value: value})
    if state.is_last_step:
        return state, True
    return _load_step(state, state.step + 1), False


def go_to_field(state: WizardState, wizard_field: WizardField) -> WizardState:
    """Jump back to the step capturing wizard_field, keeping the buffer."""
    return _load_step(state, state.steps.index(wizard_field))


# ─── Completion ──────────────────────────────────────────────────

def _optional(values: dict[str, str], wizard_field: WizardField) -> str | None:
    return values.get(wizard_field.value) or None


def build_request(state: WizardState) -> SyncRequest:
    """Convert a completed buffer into a SyncRequest for the Sync Protocol."""
    v = state.values
    if state.flow.kind == EntryKind.BLIP:
        draft: BlipDraft | AdrDraft = BlipDraft(
            name=v[WizardField.NAME.value],
            quadrant=Quadrant.parse(v.get(WizardField.QUADRANT.value)),
            ring=Ring.parse(v.get(WizardField.RING.value)),
            tag=_optional(v, WizardField.TAG),
            description=_optional(v, WizardField.DESCRIPTION),
        )
    else:
        draft = AdrDraft(
            title=v[WizardField.TITLE.value],
            blip_name=v[WizardField.BLIP_NAME.value],
            status=v.get(WizardField.STATUS.value, AdrStatus.PROPOSED.value),
            quadrant=Quadrant.parse(v.get(WizardField.QUADRANT.value)),
            ring=Ring.parse(v.get(WizardField.RING.value)),
            context=v.get(WizardField.CONTEXT.value, ""),
            decision=v.get(WizardField.DECISION.value, ""),
            consequences=v.get(WizardField.CONSEQUENCES.value, ""),
            references=v.get(WizardField.REFERENCES.value, ""),
        )
    return SyncRequest(
        kind=state.flow.kind, draft=draft,
        target_id=state.target_id if state.flow.is_edit else None,
    )
