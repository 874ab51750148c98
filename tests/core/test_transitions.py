"""Session Transitions — the pure (state, event) -> (state, effects) function.

Tests:
    - Browsing keys open wizards, settings and help, cycle views, and quit
    - Escape in a wizard always returns to BROWSING and drops the buffer
    - Empty required fields keep the wizard open with a warning
    - Completing a wizard emits exactly one Submit and blocks further input
    - Quit/cancel keys pressed while submitting are replayed afterwards
    - A replayed Escape keeps the result status; on a conflict it still discards
    - Duplicate outcomes open CONFIRM_DUPLICATE; retry returns to the name step
    - Tick and pause only affect the radar clock
    - Enter opens details for the selected row; Esc closes them
    - "/" search narrows both lists; Esc in browsing clears it
    - "v" lists the ADRs naming the selected blip
"""

from dataclasses import replace

from adr_radar.core.domain_types import (
    AdrId, BlipId, BrowseView, EntryKind, Mode, Quadrant, Ring, SyncOutcome,
    WizardField,
)
from adr_radar.core.errors import (
    DatabaseError, DuplicateNameError, ErrorSeverity, OrphanAdrError,
)
from adr_radar.core.records import AdrRecord, BlipRecord, SyncResult
from adr_radar.core.session_state import (
    Key, KeyPress, PersistSetting, Refresh, RelinkAdr, RewriteDocument,
    SessionState, Submit, Tick,
)
from adr_radar.core.transitions import (
    apply_snapshot, apply_sync_result, handle_event, report_error,
)
from adr_radar.core.wizard import WizardFlow

ENTER = KeyPress(Key.ENTER)
ESC = KeyPress(Key.ESCAPE)


def _blip(id_, name, quadrant=Quadrant.LANGUAGES, ring=Ring.TRIAL) -> BlipRecord:
    return BlipRecord(
        id=BlipId(id_), name=name, ring=ring, quadrant=quadrant, tag=None,
        description=None, created="2026-03-01", has_adr=False, adr_id=None,
    )


def _adr(id_, title, blip_name) -> AdrRecord:
    return AdrRecord(
        id=AdrId(id_), title=title, blip_name=blip_name, status="accepted",
        timestamp="2026-03-02", quadrant=None, ring=None,
    )


def _press(state, *keys):
    effects = []
    for key in keys:
        if isinstance(key, str):
            for ch in key:
                state, more = handle_event(state, KeyPress.of(ch))
                effects.extend(more)
        else:
            state, more = handle_event(state, key)
            effects.extend(more)
    return state, effects


def _submitting_blip(name="Rust"):
    state, _ = _press(SessionState(), "b", name, ENTER, ENTER, ENTER, ENTER)
    state, effects = handle_event(state, ENTER)
    return state, effects


# ─── Browsing ────────────────────────────────────────────────────

def test_q_in_browsing_exits():
    state, effects = handle_event(SessionState(), KeyPress.of("q"))
    assert state.mode == Mode.EXIT
    assert not state.running
    assert effects == []


def test_b_opens_blip_wizard():
    state, _ = handle_event(SessionState(), KeyPress.of("b"))
    assert state.mode == Mode.NEW_BLIP_WIZARD
    assert state.wizard.flow == WizardFlow.NEW_BLIP


def test_tab_cycles_views_and_resets_selection():
    state = replace(SessionState(), selected=1)
    state, _ = handle_event(state, KeyPress(Key.TAB))
    assert state.view == BrowseView.ADRS
    assert state.selected == 0
    state, _ = _press(state, KeyPress(Key.TAB), KeyPress(Key.TAB))
    assert state.view == BrowseView.BLIPS


def test_up_down_stay_in_range():
    state = apply_snapshot(SessionState(), [_blip(1, "Rust"), _blip(2, "Go")], [])
    state, _ = _press(state, KeyPress(Key.DOWN), KeyPress(Key.DOWN), KeyPress(Key.DOWN))
    assert state.selected == 1
    state, _ = _press(state, KeyPress(Key.UP), KeyPress(Key.UP))
    assert state.selected == 0


def test_unhandled_key_is_a_no_op():
    state = SessionState()
    assert handle_event(state, KeyPress.of("z")) == (state, [])


def test_r_requests_refresh():
    _, effects = handle_event(SessionState(), KeyPress.of("r"))
    assert effects == [Refresh()]


def test_help_and_settings_return_to_browsing():
    state, _ = handle_event(SessionState(), KeyPress.of("?"))
    assert state.mode == Mode.HELP
    state, _ = handle_event(state, ESC)
    assert state.mode == Mode.BROWSING
    state, _ = handle_event(state, KeyPress.of("s"))
    assert state.mode == Mode.SETTINGS
    state, _ = handle_event(state, KeyPress.of("s"))
    assert state.mode == Mode.BROWSING


# ─── Details, Search & Blip Filter ──────────────────────────────

def test_enter_opens_details_for_selected_blip():
    state = apply_snapshot(SessionState(), [_blip(1, "Rust"), _blip(2, "Go")], [])
    state, _ = _press(state, KeyPress(Key.DOWN), ENTER)
    assert state.mode == Mode.DETAILS
    assert state.selected_blip.name == "Go"
    state, _ = handle_event(state, ESC)
    assert state.mode == Mode.BROWSING


def test_enter_with_nothing_selected_warns():
    state, _ = handle_event(SessionState(), ENTER)
    assert state.mode == Mode.BROWSING
    assert state.status.severity == ErrorSeverity.WARNING


def test_edit_from_adr_details():
    state = apply_snapshot(SessionState(), [], [_adr(5, "Use Rust", "Rust")])
    state, _ = _press(state, KeyPress(Key.TAB), ENTER)
    assert state.mode == Mode.DETAILS
    assert state.selected_adr.id == 5
    state, _ = handle_event(state, KeyPress.of("e"))
    assert state.wizard.flow == WizardFlow.EDIT_ADR


def test_search_narrows_blips_and_escape_clears():
    blips = [_blip(1, "Rust"), _blip(2, "Go"), _blip(3, "Rustls")]
    state = apply_snapshot(SessionState(), blips, [])
    state, _ = _press(state, "/", "RUST", KeyPress(Key.BACKSPACE), "t", ENTER)
    assert state.mode == Mode.BROWSING
    assert state.search_query == "RUSt"
    assert [b.name for b in state.shown_blips] == ["Rust", "Rustls"]
    assert state.visible_rows == 2
    assert "2 match" in state.status.text

    state, _ = _press(state, KeyPress(Key.DOWN), KeyPress(Key.DOWN))
    assert state.selected_blip.name == "Rustls"

    state, _ = handle_event(state, ESC)
    assert state.search_query == ""
    assert len(state.shown_blips) == 3
    assert state.selected == 0


def test_q_in_search_is_typed_not_quit():
    state, _ = _press(SessionState(), "/", "q")
    assert state.mode == Mode.SEARCH
    assert state.search_query == "q"
    state, _ = handle_event(state, ESC)
    assert state.mode == Mode.BROWSING
    assert state.search_query == ""


def test_search_matches_adr_status():
    adrs = [
        _adr(1, "Use Rust", "Rust"),
        replace(_adr(2, "Use Go", "Go"), status="rejected"),
    ]
    state = apply_snapshot(SessionState(), [], adrs)
    state, _ = _press(state, KeyPress(Key.TAB), "/", "reject", ENTER)
    assert [a.title for a in state.shown_adrs] == ["Use Go"]
    assert state.selected_adr.id == 2


def test_v_lists_adrs_for_selected_blip():
    adrs = [
        _adr(1, "Use Rust", "Rust"), _adr(2, "Use Go", "Go"), _adr(3, "Rust CI", "Rust"),
    ]
    state = apply_snapshot(SessionState(), [_blip(1, "Rust"), _blip(2, "Go")], adrs)
    state, _ = handle_event(state, KeyPress.of("v"))
    assert state.view == BrowseView.ADRS
    assert state.adr_blip_filter == "Rust"
    assert [a.id for a in state.shown_adrs] == [1, 3]
    assert "2 ADR(s)" in state.status.text

    state, _ = handle_event(state, KeyPress.of("a"))
    assert state.wizard.values[WizardField.BLIP_NAME.value] == "Rust"


def test_v_from_blip_details_and_escape_shows_all():
    state = apply_snapshot(
        SessionState(), [_blip(1, "Zig")], [_adr(1, "Use Rust", "Rust")],
    )
    state, _ = _press(state, ENTER, "v")
    assert state.mode == Mode.BROWSING
    assert state.shown_adrs == ()
    assert state.status.severity == ErrorSeverity.WARNING
    state, _ = handle_event(state, ESC)
    assert state.adr_blip_filter is None
    assert len(state.shown_adrs) == 1


# ─── Wizards ─────────────────────────────────────────────────────

def test_escape_cancels_wizard_from_any_step():
    state, _ = _press(SessionState(), "b", "Rust", ENTER, ENTER)
    state, effects = handle_event(state, ESC)
    assert state.mode == Mode.BROWSING
    assert state.wizard is None
    assert effects == []


def test_q_inside_wizard_is_typed_not_quit():
    state, _ = _press(SessionState(), "b", "q")
    assert state.mode == Mode.NEW_BLIP_WIZARD
    assert state.wizard.text == "q"


def test_empty_name_keeps_wizard_open_with_warning():
    state, effects = _press(SessionState(), "b", ENTER)
    assert state.mode == Mode.NEW_BLIP_WIZARD
    assert state.wizard.current_field == WizardField.NAME
    assert state.status.severity == ErrorSeverity.WARNING
    assert effects == []


def test_completing_wizard_emits_single_submit():
    state, effects = _submitting_blip()
    assert state.submitting
    assert len(effects) == 1
    assert isinstance(effects[0], Submit)
    assert effects[0].request.identifier == "Rust"


def test_input_while_submitting_is_ignored_except_quit():
    state, _ = _submitting_blip()
    after, effects = _press(state, "b", KeyPress(Key.DOWN))
    assert after == state
    after, _ = handle_event(state, KeyPress.of("q"))
    assert after.pending_keys == (KeyPress.of("q"),)
    assert after.mode == state.mode


def test_new_adr_prefills_selected_blip_and_inherits_classification():
    blip = _blip(1, "Rust", Quadrant.LANGUAGES, Ring.ADOPT)
    state = apply_snapshot(SessionState(), [blip], [])
    state, _ = _press(state, "a")
    assert state.mode == Mode.NEW_ADR_WIZARD
    assert state.wizard.values[WizardField.BLIP_NAME.value] == "Rust"
    state, _ = _press(state, "Use Rust", ENTER, ENTER)
    assert state.wizard.values["quadrant"] == "languages"
    assert state.wizard.values["ring"] == "adopt"


def test_edit_on_adr_view_opens_adr_edit():
    state = apply_snapshot(SessionState(), [], [_adr(5, "Use Rust", "Rust")])
    state, _ = _press(state, KeyPress(Key.TAB), "e")
    assert state.mode == Mode.EDIT_WIZARD
    assert state.wizard.flow == WizardFlow.EDIT_ADR
    assert state.wizard.target_id == 5
    assert state.wizard.text == "Use Rust"


def test_edit_with_nothing_selected_warns():
    state, _ = handle_event(SessionState(), KeyPress.of("e"))
    assert state.mode == Mode.BROWSING
    assert state.status.severity == ErrorSeverity.WARNING


# ─── Results ─────────────────────────────────────────────────────

def test_created_result_returns_to_browsing_and_refreshes():
    state, _ = _submitting_blip()
    result = SyncResult(
        SyncOutcome.CREATED, EntryKind.BLIP, "Rust", record_id=1,
        file_path="blips/2026-03-01-1-rust.md",
    )
    state, effects = apply_sync_result(state, result)
    assert state.mode == Mode.BROWSING
    assert not state.submitting
    assert state.wizard is None
    assert effects == [Refresh()]
    assert "Created" in state.status.text


def test_duplicate_opens_confirm_then_retry_returns_to_name():
    state, _ = _submitting_blip()
    result = SyncResult(
        SyncOutcome.DUPLICATE_NAME, EntryKind.BLIP, "Rust",
        error=DuplicateNameError("Rust"),
    )
    state, effects = apply_sync_result(state, result)
    assert state.mode == Mode.CONFIRM_DUPLICATE
    assert state.conflict.identifier == "Rust"
    assert effects == []
    state, _ = handle_event(state, KeyPress.of("r"))
    assert state.mode == Mode.NEW_BLIP_WIZARD
    assert state.wizard.current_field == WizardField.NAME
    assert state.wizard.values["quadrant"] == "platforms"


def test_duplicate_discard_returns_to_browsing():
    state, _ = _submitting_blip()
    result = SyncResult(
        SyncOutcome.DUPLICATE_NAME, EntryKind.BLIP, "Rust",
        error=DuplicateNameError("Rust"),
    )
    state, _ = apply_sync_result(state, result)
    state, _ = handle_event(state, ESC)
    assert state.mode == Mode.BROWSING
    assert state.conflict is None


def test_orphan_result_is_a_warning_not_a_conflict():
    state, _ = _press(SessionState(), "a", "Use Zig", ENTER, "Zig", ENTER)
    while not state.submitting:
        state, _ = handle_event(state, ENTER)
    result = SyncResult(
        SyncOutcome.ORPHAN_ADR, EntryKind.ADR, "Use Zig", record_id=1,
        error=OrphanAdrError("Zig"),
    )
    state, effects = apply_sync_result(state, result)
    assert state.mode == Mode.BROWSING
    assert state.status.severity == ErrorSeverity.WARNING
    assert effects == [Refresh()]


def test_queued_quit_is_replayed_after_result():
    state, _ = _submitting_blip()
    state, _ = handle_event(state, KeyPress.of("q"))
    result = SyncResult(SyncOutcome.CREATED, EntryKind.BLIP, "Rust", record_id=1)
    state, _ = apply_sync_result(state, result)
    assert state.mode == Mode.EXIT


def test_queued_escape_keeps_result_status():
    state, _ = _submitting_blip()
    state, _ = handle_event(state, ESC)
    result = SyncResult(SyncOutcome.CREATED, EntryKind.BLIP, "Rust", record_id=1)
    state, _ = apply_sync_result(state, result)
    assert state.mode == Mode.BROWSING
    assert "Created" in state.status.text

    state, _ = _submitting_blip()
    state, _ = handle_event(state, ESC)
    state, _ = report_error(state, DatabaseError("disk I/O error", "commit"))
    assert "disk I/O error" in state.status.text


def test_queued_escape_discards_duplicate():
    state, _ = _submitting_blip()
    state, _ = handle_event(state, ESC)
    result = SyncResult(
        SyncOutcome.DUPLICATE_NAME, EntryKind.BLIP, "Rust",
        error=DuplicateNameError("Rust"),
    )
    state, _ = apply_sync_result(state, result)
    assert state.mode == Mode.BROWSING
    assert state.conflict is None


def test_report_error_surfaces_status_and_unblocks():
    state, _ = _submitting_blip()
    state, _ = report_error(state, DatabaseError("disk I/O error", "commit"))
    assert not state.submitting
    assert state.status.severity == ErrorSeverity.CRITICAL


def test_rewrite_and_relink_target_the_selection():
    adr = _adr(3, "Use Rust", "Rust")
    state = apply_snapshot(SessionState(), [_blip(1, "Rust")], [adr])
    _, effects = handle_event(state, KeyPress.of("w"))
    assert effects == [RewriteDocument(EntryKind.BLIP, 1)]
    state, _ = handle_event(state, KeyPress(Key.TAB))
    _, effects = handle_event(state, KeyPress.of("l"))
    assert effects == [RelinkAdr(3)]


def test_snapshot_clamps_selection():
    state = replace(SessionState(), selected=4)
    state = apply_snapshot(state, [_blip(1, "Rust")], [])
    assert state.selected == 0


# ─── Settings & Clock ────────────────────────────────────────────

def test_settings_edit_emits_persist():
    state, effects = _press(SessionState(), "s", ENTER, "docs/adr", ENTER)
    assert state.settings.values["ADR_DIR"] == "docs/adr"
    assert effects == [PersistSetting("ADR_DIR", "docs/adr")]


def test_empty_setting_is_rejected():
    state, effects = _press(SessionState(), "s", ENTER, ENTER)
    assert effects == []
    assert state.settings.editing


def test_tick_updates_clock_only():
    state = SessionState(started_at=10.0, now=10.0)
    state, effects = handle_event(state, Tick(12.5))
    assert state.elapsed == 2.5
    assert effects == []
    assert state.mode == Mode.BROWSING


def test_pause_freezes_elapsed_and_resume_continues():
    state = SessionState(started_at=0.0, now=3.0)
    state, _ = handle_event(state, KeyPress.of("p"))
    state, _ = handle_event(state, Tick(10.0))
    assert state.elapsed == 3.0
    state, _ = handle_event(state, KeyPress.of("p"))
    state, _ = handle_event(state, Tick(11.0))
    assert state.elapsed == 4.0
