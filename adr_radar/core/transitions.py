"""Session Transitions — the single (state, event) -> (state, effects) function.

Invariants:
    - handle_event is PURE: it never performs IO, it returns effects for the shell
    - EXIT is reachable only from BROWSING
    - Escape in any wizard step returns to BROWSING and discards the buffer
    - While submitting, only quit/cancel keys are accepted, and only as queued input
    - A replayed Escape never clears the status left by the write it followed
    - Duplicate outcomes open CONFIRM_DUPLICATE; retry returns to the identifier step
    - Unhandled input leaves the state unchanged and emits no effects
    - Escape while browsing clears an active search or blip filter before the status

Design Decisions:
    - One dispatch per mode, each a small function: adding a screen is local
    - Wizard validation errors become a status message, not an exception: the
      session always returns to an interactive state
"""

from dataclasses import replace

from adr_radar.core.domain_types import (
    BrowseView, EntryKind, Mode, SyncOutcome, WizardField,
)
from adr_radar.core.errors import ErrorSeverity, RadarError, WizardValidationError
from adr_radar.core.records import AdrRecord, BlipRecord, SyncResult
from adr_radar.core.session_state import (
    SETTINGS_KEYS, DuplicateConflict, Effect, Event, Key, KeyPress,
    PersistSetting, Refresh, RelinkAdr, RewriteDocument, SessionState,
    SettingsState, StatusMessage, Submit, Tick,
)
from adr_radar.core.wizard import (
    IDENTIFIER_FIELD, WizardFlow, WizardState, backspace, build_request,
    confirm_step, go_to_field, move_cursor, start_wizard, type_char, with_values,
)


Transition = tuple[SessionState, list[Effect]]

WIZARD_MODES: dict[WizardFlow, Mode] = {
    WizardFlow.NEW_BLIP: Mode.NEW_BLIP_WIZARD,
    WizardFlow.NEW_ADR: Mode.NEW_ADR_WIZARD,
    WizardFlow.EDIT_BLIP: Mode.EDIT_WIZARD,
    WizardFlow.EDIT_ADR: Mode.EDIT_WIZARD,
}

# Keys that may be queued while a write is in flight
_QUEUEABLE = {KeyPress(Key.ESCAPE), KeyPress.of("q")}

_VIEW_ORDER = list(BrowseView)


def _info(text: str) -> StatusMessage:
    return StatusMessage(text, ErrorSeverity.INFO)


def _warn(text: str) -> StatusMessage:
    return StatusMessage(text, ErrorSeverity.WARNING)


# ─── Entry Point ─────────────────────────────────────────────────

def handle_event(state: SessionState, event: Event) -> Transition:
    """Apply one input event or tick to the session."""
    if isinstance(event, Tick):
        return replace(state, now=event.now), []

    if state.submitting:
        if event in _QUEUEABLE:
            return replace(state, pending_keys=state.pending_keys + (event,)), []
        return state, []

    handlers = {
        Mode.BROWSING: _browsing,
        Mode.NEW_BLIP_WIZARD: _wizard,
        Mode.NEW_ADR_WIZARD: _wizard,
        Mode.EDIT_WIZARD: _wizard,
        Mode.SETTINGS: _settings,
        Mode.HELP: _help,
        Mode.CONFIRM_DUPLICATE: _confirm_duplicate,
        Mode.DETAILS: _details,
        Mode.SEARCH: _search,
    }
    handler = handlers.get(state.mode)
    if handler is None:
        return state, []
    return handler(state, event)


# ─── Browsing ────────────────────────────────────────────────────

def _open_wizard(state: SessionState, wizard: WizardState) -> SessionState:
    return replace(
        state, mode=WIZARD_MODES[wizard.flow], wizard=wizard, status=None,
    )


def blip_values(blip: BlipRecord) -> dict[str, str]:
    return {
        WizardField.NAME.value: blip.name,
        WizardField.QUADRANT.value: blip.quadrant.value if blip.quadrant else "",
        WizardField.RING.value: blip.ring.value if blip.ring else "",
        WizardField.TAG.value: blip.tag or "",
        WizardField.DESCRIPTION.value: blip.description or "",
    }


def adr_values(adr: AdrRecord) -> dict[str, str]:
    return {
        WizardField.TITLE.value: adr.title,
        WizardField.BLIP_NAME.value: adr.blip_name,
        WizardField.STATUS.value: adr.status,
        WizardField.QUADRANT.value: adr.quadrant.value if adr.quadrant else "",
        WizardField.RING.value: adr.ring.value if adr.ring else "",
    }


def _browsing(state: SessionState, event: KeyPress) -> Transition:
    key, char = event.key, event.char

    if key == Key.UP and state.visible_rows:
        return replace(state, selected=max(0, state.selected - 1)), []
    if key == Key.DOWN and state.visible_rows:
        return replace(
            state, selected=min(state.visible_rows - 1, state.selected + 1),
        ), []
    if key == Key.TAB:
        nxt = _VIEW_ORDER[(_VIEW_ORDER.index(state.view) + 1) % len(_VIEW_ORDER)]
        return replace(state, view=nxt, selected=0, adr_blip_filter=None), []
    if key == Key.ENTER:
        return _open_details(state), []
    if key == Key.ESCAPE:
        if state.search_query or state.adr_blip_filter is not None:
            return replace(
                state, search_query="", adr_blip_filter=None, selected=0,
                status=_info("Filter cleared"),
            ), []
        return replace(state, status=None), []
    if key != Key.CHAR:
        return state, []

    if char == "q":
        return replace(state, mode=Mode.EXIT), []
    if char == "b":
        return _open_wizard(state, start_wizard(WizardFlow.NEW_BLIP)), []
    if char == "a":
        initial = {}
        if state.selected_blip is not None:
            initial[WizardField.BLIP_NAME.value] = state.selected_blip.name
        elif state.adr_blip_filter is not None:
            initial[WizardField.BLIP_NAME.value] = state.adr_blip_filter
        return _open_wizard(state, start_wizard(WizardFlow.NEW_ADR, initial)), []
    if char == "e":
        return _start_edit(state), []
    if char == "s":
        return replace(
            state, mode=Mode.SETTINGS,
            settings=replace(state.settings, selection=0, editing=False, input=""),
        ), []
    if char == "?":
        return replace(state, mode=Mode.HELP), []
    if char == "/":
        return replace(state, mode=Mode.SEARCH, selected=0, status=None), []
    if char == "v":
        return _show_blip_adrs(state), []
    if char == "p":
        return _toggle_pause(state), []
    if char == "r":
        return replace(state, status=_info("Reloading...")), [Refresh()]
    if char == "w":
        return _rewrite_selected(state)
    if char == "l":
        adr = state.selected_adr
        if adr is None:
            return replace(state, status=_warn("Select an ADR to re-link")), []
        return replace(state, submitting=True), [RelinkAdr(adr.id)]
    return state, []


def _open_details(state: SessionState) -> SessionState:
    if state.selected_adr is None and state.selected_blip is None:
        return replace(state, status=_warn("Nothing selected"))
    return replace(state, mode=Mode.DETAILS, status=None)


def _show_blip_adrs(state: SessionState) -> SessionState:
    """Switch to the ADR list, narrowed to the ADRs naming the selected blip."""
    blip = state.selected_blip
    if blip is None:
        return replace(state, status=_warn("Select a blip to list its ADRs"))
    state = replace(
        state, mode=Mode.BROWSING, view=BrowseView.ADRS, selected=0,
        adr_blip_filter=blip.name, search_query="",
    )
    if not state.shown_adrs:
        return replace(
            state, status=_warn(f"No ADRs for '{blip.name}' yet (a: write one)"),
        )
    return replace(
        state, status=_info(f"{len(state.shown_adrs)} ADR(s) for '{blip.name}'"),
    )


def _start_edit(state: SessionState) -> SessionState:
    if state.selected_adr is not None:
        adr = state.selected_adr
        wizard = start_wizard(WizardFlow.EDIT_ADR, adr_values(adr), target_id=adr.id)
        return _open_wizard(state, wizard)
    if state.selected_blip is not None:
        blip = state.selected_blip
        wizard = start_wizard(WizardFlow.EDIT_BLIP, blip_values(blip), target_id=blip.id)
        return _open_wizard(state, wizard)
    return replace(state, status=_warn("Nothing selected to edit"))


def _rewrite_selected(state: SessionState) -> Transition:
    if state.selected_adr is not None:
        effect = RewriteDocument(EntryKind.ADR, state.selected_adr.id)
    elif state.selected_blip is not None:
        effect = RewriteDocument(EntryKind.BLIP, state.selected_blip.id)
    else:
        return replace(state, status=_warn("Nothing selected to write")), []
    return replace(state, submitting=True), [effect]


def _toggle_pause(state: SessionState) -> SessionState:
    if state.animation_paused:
        return replace(
            state, animation_paused=False,
            started_at=state.now - state.paused_elapsed,
            status=_info("Animation resumed"),
        )
    return replace(
        state, animation_paused=True, paused_elapsed=state.elapsed,
        status=_info("Animation paused"),
    )


# ─── Wizards ─────────────────────────────────────────────────────

def _inherit_classification(state: SessionState, wizard: WizardState) -> WizardState:
    """ADRs inherit quadrant/ring from the blip they justify, when it is known."""
    name = wizard.values.get(WizardField.BLIP_NAME.value, "")
    blip = next((b for b in state.blips if b.name == name), None)
    if blip is None or not blip.is_classified:
        return wizard
    return with_values(
        wizard,
        **{
            WizardField.QUADRANT.value: blip.quadrant.value,
            WizardField.RING.value: blip.ring.value,
        },
    )


def _wizard(state: SessionState, event: KeyPress) -> Transition:
    wizard = state.wizard
    if wizard is None:
        return replace(state, mode=Mode.BROWSING), []

    key = event.key
    if key == Key.ESCAPE:
        return replace(
            state, mode=Mode.BROWSING, wizard=None, status=_info("Cancelled"),
        ), []
    if key == Key.CHAR:
        return replace(state, wizard=type_char(wizard, event.char)), []
    if key == Key.BACKSPACE:
        return replace(state, wizard=backspace(wizard)), []
    if key in (Key.UP, Key.LEFT):
        return replace(state, wizard=move_cursor(wizard, -1)), []
    if key in (Key.DOWN, Key.RIGHT, Key.TAB):
        return replace(state, wizard=move_cursor(wizard, 1)), []
    if key != Key.ENTER:
        return state, []

    confirmed_field = wizard.current_field
    try:
        wizard, completed = confirm_step(wizard)
    except WizardValidationError as e:
        return replace(state, status=_warn(e.status_text())), []

    if confirmed_field == WizardField.BLIP_NAME and wizard.flow == WizardFlow.NEW_ADR:
        wizard = _inherit_classification(state, wizard)

    if not completed:
        return replace(state, wizard=wizard, status=None), []

    return replace(
        state, wizard=wizard, submitting=True,
        status=_info(f"Saving '{wizard.identifier}'..."),
    ), [Submit(build_request(wizard))]


# ─── Settings, Help, Details & Search ────────────────────────────

def _settings(state: SessionState, event: KeyPress) -> Transition:
    s = state.settings
    key = event.key

    if s.editing:
        if key == Key.ESCAPE:
            return replace(state, settings=replace(s, editing=False, input="")), []
        if key == Key.BACKSPACE:
            return replace(state, settings=replace(s, input=s.input[:-1])), []
        if key == Key.CHAR:
            return replace(state, settings=replace(s, input=s.input + event.char)), []
        if key == Key.ENTER:
            value = s.input.strip()
            if not value:
                return replace(state, status=_warn("Setting cannot be empty")), []
            new_settings = SettingsState(
                values={**s.values, s.selected_key: value},
                selection=s.selection,
            )
            return replace(
                state, settings=new_settings,
                status=_info(f"{s.selected_key} set to {value}"),
            ), [PersistSetting(s.selected_key, value)]
        return state, []

    if key == Key.UP:
        return replace(state, settings=replace(
            s, selection=(s.selection - 1) % len(SETTINGS_KEYS),
        )), []
    if key == Key.DOWN:
        return replace(state, settings=replace(
            s, selection=(s.selection + 1) % len(SETTINGS_KEYS),
        )), []
    if key == Key.ENTER:
        current = s.values.get(s.selected_key, "")
        return replace(state, settings=replace(s, editing=True, input=current)), []
    if key == Key.ESCAPE or event == KeyPress.of("s"):
        return replace(state, mode=Mode.BROWSING), []
    return state, []


def _help(state: SessionState, event: KeyPress) -> Transition:
    if event.key == Key.ESCAPE or event == KeyPress.of("?"):
        return replace(state, mode=Mode.BROWSING), []
    return state, []


def _details(state: SessionState, event: KeyPress) -> Transition:
    if event.key in (Key.ESCAPE, Key.ENTER):
        return replace(state, mode=Mode.BROWSING), []
    if event == KeyPress.of("e"):
        return _start_edit(state), []
    if event == KeyPress.of("v") and state.selected_blip is not None:
        return _show_blip_adrs(state), []
    return state, []


def _search(state: SessionState, event: KeyPress) -> Transition:
    key = event.key
    if key == Key.ESCAPE:
        return replace(state, mode=Mode.BROWSING, search_query="", selected=0), []
    if key == Key.ENTER:
        query = state.search_query.strip()
        state = replace(state, mode=Mode.BROWSING, search_query=query, selected=0)
        if not query:
            return state, []
        return replace(
            state, status=_info(f"Filter '{query}': {state.visible_rows} match(es)"),
        ), []
    if key == Key.BACKSPACE:
        return replace(state, search_query=state.search_query[:-1], selected=0), []
    if key == Key.CHAR:
        query = state.search_query + event.char
        return replace(state, search_query=query, selected=0), []
    return state, []


# ─── Duplicate Resolution ────────────────────────────────────────

def _confirm_duplicate(state: SessionState, event: KeyPress) -> Transition:
    conflict = state.conflict
    if conflict is None:
        return replace(state, mode=Mode.BROWSING), []

    if event.key == Key.ENTER or event == KeyPress.of("r"):
        wizard = go_to_field(conflict.wizard, IDENTIFIER_FIELD[conflict.wizard.flow.kind])
        return replace(
            state, mode=WIZARD_MODES[wizard.flow], wizard=wizard, conflict=None,
            status=_info(f"Enter a new name instead of '{conflict.identifier}'"),
        ), []
    if event.key == Key.ESCAPE or event == KeyPress.of("d"):
        return replace(
            state, mode=Mode.BROWSING, wizard=None, conflict=None,
            status=_info(f"Discarded '{conflict.identifier}'"),
        ), []
    return state, []


# ─── Results From The Shell ──────────────────────────────────────

def _replay(
    state: SessionState, pending: tuple[KeyPress, ...], effects: list[Effect],
) -> Transition:
    """Re-feed keys queued during a write.

    A queued Escape that lands on BROWSING is skipped, so the write's result
    stays on the status line.
    """
    for key in pending:
        if key.key == Key.ESCAPE and state.mode == Mode.BROWSING:
            continue
        state, more = handle_event(state, key)
        effects.extend(more)
    return state, effects


def apply_sync_result(state: SessionState, result: SyncResult) -> Transition:
    """Fold a Sync Protocol result into the session, then replay queued keys."""
    pending = state.pending_keys
    state = replace(state, submitting=False, pending_keys=())
    effects: list[Effect] = []

    if result.outcome.is_conflict and state.wizard is not None:
        state = replace(
            state, mode=Mode.CONFIRM_DUPLICATE,
            conflict=DuplicateConflict(
                wizard=state.wizard, identifier=result.identifier,
                outcome=result.outcome,
            ),
            wizard=None,
            status=_warn(result.message),
        )
    else:
        severity = ErrorSeverity.INFO
        if result.error is not None:
            severity = result.error.severity
        state = replace(
            state, mode=Mode.BROWSING, wizard=None,
            status=StatusMessage(result.message, severity),
        )
        if result.record_id is not None or result.outcome == SyncOutcome.NOT_FOUND:
            effects.append(Refresh())

    return _replay(state, pending, effects)


def apply_snapshot(
    state: SessionState, blips: list[BlipRecord], adrs: list[AdrRecord],
) -> SessionState:
    """Replace the cached snapshot, keeping the selection in range."""
    state = replace(state, blips=tuple(blips), adrs=tuple(adrs))
    rows = state.visible_rows
    return replace(state, selected=min(state.selected, max(rows - 1, 0)))


def apply_settings(state: SessionState, values: dict[str, str]) -> SessionState:
    return replace(state, settings=replace(state.settings, values=dict(values)))


def report_error(state: SessionState, error: RadarError) -> Transition:
    """Surface a collaborator failure and return to an interactive state."""
    pending = state.pending_keys
    state = replace(
        state, submitting=False, pending_keys=(),
        status=StatusMessage(error.status_text(), error.severity),
    )
    return _replay(state, pending, [])
