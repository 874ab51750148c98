"""Terminal Renderer — pure read of SessionState into rich renderables.

Invariants:
    - Nothing here mutates state or performs IO; same state in, same layout out
    - Radar positions come from core.radar_geometry only
    - Every mode has exactly one main panel; the status line is always visible
    - List tables show the filtered rows the selection indexes into
"""

import math

from rich.console import Group
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from adr_radar.core.domain_types import BrowseView, Mode, Quadrant, Ring
from adr_radar.core.errors import ErrorSeverity
from adr_radar.core.radar_geometry import (
    DEFAULT_SWEEP_PERIOD_S, RING_BANDS, plot_blips, polar_to_xy, sweep_angle,
    to_canvas,
)
from adr_radar.core.session_state import SETTINGS_KEYS, SessionState
from adr_radar.core.wizard import PROMPTS, WizardState

RADAR_WIDTH = 61
RADAR_HEIGHT = 31

RING_STYLES: dict[Ring, str] = {
    Ring.ADOPT: "bold green",
    Ring.TRIAL: "bold cyan",
    Ring.ASSESS: "bold yellow",
    Ring.HOLD: "bold red",
}

SEVERITY_STYLES: dict[ErrorSeverity, str] = {
    ErrorSeverity.INFO: "green",
    ErrorSeverity.WARNING: "yellow",
    ErrorSeverity.ERROR: "red",
    ErrorSeverity.CRITICAL: "bold red",
}

MARKERS = "123456789abcdefghijkmnopqrstuvwxyz"

HELP_LINES: tuple[tuple[str, str], ...] = (
    ("Up/Down", "select a row"),
    ("Tab", "cycle blips / ADRs / radar"),
    ("b", "new blip"),
    ("a", "new ADR (for the selected blip)"),
    ("e", "edit the selected row"),
    ("w", "re-write the selected document"),
    ("l", "re-link the selected ADR to its blip"),
    ("r", "reload from the database"),
    ("p", "pause or resume the sweep"),
    ("s", "settings"),
    ("?", "this help"),
    ("Esc", "cancel / back"),
    ("q", "quit"),
)


# ─── Radar ───────────────────────────────────────────────────────

def radar_cells(
    state: SessionState,
    width: int = RADAR_WIDTH,
    height: int = RADAR_HEIGHT,
    period_s: float = DEFAULT_SWEEP_PERIOD_S,
) -> list[list[tuple[str, str]]]:
    """Character grid of (char, style) cells: rings, axes, sweep line, blips."""
    grid = [[(" ", "")] * width for _ in range(height)]
    half_w, half_h = (width - 1) / 2.0, (height - 1) / 2.0
    ring_edges = sorted({outer for _, outer in RING_BANDS.values()})
    tolerance = 1.0 / max(half_h, 1.0) / 2.0

    for row in range(height):
        for col in range(width):
            x = (col - half_w) / half_w
            y = (half_h - row) / half_h
            r = math.hypot(x, y)
            if r > 1.0 + tolerance:
                continue
            if any(abs(r - edge) < tolerance for edge in ring_edges):
                grid[row][col] = ("·", "dim")
            elif col == round(half_w):
                grid[row][col] = ("│", "dim")
            elif row == round(half_h):
                grid[row][col] = ("─", "dim")

    angle = sweep_angle(state.elapsed, period_s)
    steps = max(width, height)
    for i in range(1, steps + 1):
        col, row = to_canvas(*polar_to_xy(angle, i / steps), width, height)
        grid[row][col] = ("•", "bright_green")

    for marker, point in zip(MARKERS, plot_blips(state.blips)):
        col, row = to_canvas(point.x, point.y, width, height)
        grid[row][col] = (marker, RING_STYLES[point.ring])
    return grid


def render_radar(state: SessionState, period_s: float = DEFAULT_SWEEP_PERIOD_S) -> Group:
    text = Text()
    for line in radar_cells(state, period_s=period_s):
        for char, style in line:
            text.append(char, style=style or None)
        text.append("\n")

    legend = Table.grid(padding=(0, 1))
    for marker, point in zip(MARKERS, plot_blips(state.blips)):
        legend.add_row(
            Text(marker, style=RING_STYLES[point.ring]),
            point.name,
            Text(f"{point.quadrant.label} / {point.ring.label}", style="dim"),
        )
    quadrants = "  ".join(
        f"{q.label}: {_clock_position(q)}" for q in Quadrant
    )
    return Group(text, Text(quadrants, style="dim"), legend)


def _clock_position(quadrant: Quadrant) -> str:
    return ("12-3", "3-6", "6-9", "9-12")[quadrant.index]


# ─── Lists ───────────────────────────────────────────────────────

def render_blip_table(state: SessionState) -> Table:
    table = Table(show_header=True, header_style="bold magenta", expand=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name")
    table.add_column("Quadrant")
    table.add_column("Ring")
    table.add_column("Tag")
    table.add_column("ADR")
    table.add_column("Created", style="dim")
    for i, blip in enumerate(state.shown_blips):
        table.add_row(
            str(blip.id), blip.name,
            blip.quadrant.label if blip.quadrant else "-",
            Text(blip.ring.label, style=RING_STYLES[blip.ring]) if blip.ring else "-",
            blip.tag or "",
            "✓" if blip.has_adr else "",
            blip.created,
            style="reverse" if i == state.selected else None,
        )
    return table


def render_adr_table(state: SessionState) -> Table:
    table = Table(show_header=True, header_style="bold magenta", expand=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title")
    table.add_column("Blip")
    table.add_column("Status")
    table.add_column("Date", style="dim")
    linked = {b.adr_id for b in state.blips if b.adr_id is not None}
    for i, adr in enumerate(state.shown_adrs):
        blip = adr.blip_name if adr.id in linked else f"{adr.blip_name} (unlinked)"
        table.add_row(
            str(adr.id), adr.title, blip, adr.status, adr.timestamp,
            style="reverse" if i == state.selected else None,
        )
    return table


# ─── Overlays ────────────────────────────────────────────────────

def render_wizard(wizard: WizardState) -> Panel:
    lines = Text()
    for i, wizard_field in enumerate(wizard.steps):
        marker = "›" if i == wizard.step else " "
        value = wizard.values.get(wizard_field.value, "")
        if i == wizard.step:
            lines.append(f"{marker} {PROMPTS[wizard_field]}: ", style="bold")
            if wizard.is_choice:
                for j, option in enumerate(wizard.choices):
                    style = "reverse" if j == wizard.cursor else ""
                    lines.append(f" {option} ", style=style)
            else:
                lines.append(wizard.text + "▏")
        else:
            lines.append(f"{marker} {PROMPTS[wizard_field]}: ", style="dim")
            lines.append(value)
        lines.append("\n")
    title = f"{wizard.flow.value.replace('_', ' ').title()}  (step {wizard.step + 1}/{len(wizard.steps)})"
    return Panel(
        lines, title=title,
        subtitle="Enter: next  Esc: cancel  ←/→: choose", border_style="cyan",
    )


def render_help() -> Panel:
    table = Table.grid(padding=(0, 2))
    for key, action in HELP_LINES:
        table.add_row(Text(key, style="bold"), action)
    return Panel(table, title="Keys", border_style="blue")


def render_settings(state: SessionState) -> Panel:
    s = state.settings
    table = Table.grid(padding=(0, 2))
    for i, key in enumerate(SETTINGS_KEYS):
        value = s.values.get(key, "")
        if i == s.selection and s.editing:
            value = s.input + "▏"
        table.add_row(
            Text(key, style="reverse" if i == s.selection else "bold"), value,
        )
    return Panel(
        table, title="Settings",
        subtitle="Enter: edit/save  Esc: back", border_style="blue",
    )


def _field_grid(rows: list[tuple[str, object]]) -> Table:
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="bold")
    grid.add_column()
    for label, value in rows:
        grid.add_row(label, "-" if value in (None, "") else str(value))
    return grid


def render_details(state: SessionState) -> Panel:
    """Every stored field of the selected blip or ADR."""
    adr = state.selected_adr
    if adr is not None:
        linked = any(b.adr_id == adr.id for b in state.blips)
        grid = _field_grid([
            ("ID", adr.id),
            ("Title", adr.title),
            ("Blip", adr.blip_name if linked else f"{adr.blip_name} (unlinked)"),
            ("Status", adr.status),
            ("Date", adr.timestamp),
            ("Quadrant", adr.quadrant.label if adr.quadrant else None),
            ("Ring", adr.ring.label if adr.ring else None),
        ])
        return Panel(
            grid, title=f"ADR: {adr.title}",
            subtitle="Esc: back  e: edit", border_style="yellow",
        )

    blip = state.selected_blip
    if blip is None:
        return Panel(Text("Nothing selected", style="dim"), title="Details")
    linked_adr = next((a for a in state.adrs if a.id == blip.adr_id), None)
    naming = sum(1 for a in state.adrs if a.blip_name == blip.name)
    grid = _field_grid([
        ("ID", blip.id),
        ("Name", blip.name),
        ("Quadrant", blip.quadrant.label if blip.quadrant else None),
        ("Ring", blip.ring.label if blip.ring else None),
        ("Tag", blip.tag),
        ("Created", blip.created),
        ("ADR", f"#{linked_adr.id} {linked_adr.title}" if linked_adr else None),
        ("ADRs naming it", naming),
    ])
    description = Text(
        blip.description or "No description yet.",
        style="" if blip.description else "dim",
    )
    return Panel(
        Group(grid, Text(""), Text("Description", style="bold"), description),
        title=f"Blip: {blip.name}",
        subtitle="Esc: back  e: edit  v: its ADRs", border_style="yellow",
    )


def render_conflict(state: SessionState) -> Panel:
    conflict = state.conflict
    identifier = conflict.identifier if conflict else ""
    body = Text.assemble(
        (f"'{identifier}' already exists.\n\n", "bold yellow"),
        "Enter / r: choose another name\n",
        "Esc / d: discard this entry",
    )
    return Panel(body, title="Duplicate", border_style="yellow")


# ─── Layout ──────────────────────────────────────────────────────

def render_status(state: SessionState) -> Text:
    if state.submitting:
        return Text("Saving...", style="yellow")
    if state.status is None:
        return Text("? for help", style="dim")
    return Text(state.status.text, style=SEVERITY_STYLES[state.status.severity])


def _list_title(state: SessionState, base: str) -> str:
    title = base
    if state.view == BrowseView.ADRS and state.adr_blip_filter is not None:
        title += f" for '{state.adr_blip_filter}'"
    if state.mode == Mode.SEARCH:
        title += f"  /{state.search_query}▏"
    elif state.search_query:
        title += f"  matching '{state.search_query}'"
    return title


def render_main(state: SessionState, period_s: float = DEFAULT_SWEEP_PERIOD_S):
    if state.mode == Mode.HELP:
        return render_help()
    if state.mode == Mode.SETTINGS:
        return render_settings(state)
    if state.mode == Mode.CONFIRM_DUPLICATE:
        return render_conflict(state)
    if state.mode == Mode.DETAILS:
        return render_details(state)
    if state.wizard is not None:
        return render_wizard(state.wizard)
    if state.view == BrowseView.ADRS:
        return Panel(render_adr_table(state), title=_list_title(state, "ADRs"))
    if state.view == BrowseView.RADAR and state.mode != Mode.SEARCH:
        return Panel(render_radar(state, period_s), title="Radar")
    return Panel(render_blip_table(state), title=_list_title(state, "Blips"))


def render_session(state: SessionState, period_s: float = DEFAULT_SWEEP_PERIOD_S) -> Layout:
    """Full screen: header, main panel, status line."""
    layout = Layout()
    layout.split_column(
        Layout(name="header", size=1),
        Layout(name="main"),
        Layout(name="status", size=1),
    )
    header = Text.assemble(
        ("adr-radar", "bold cyan"),
        f"  {len(state.blips)} blips  {len(state.adrs)} ADRs  ",
        (f"[{state.view.value}]", "dim"),
        ("  paused" if state.animation_paused else "", "yellow"),
    )
    layout["header"].update(header)
    layout["main"].update(render_main(state, period_s))
    layout["status"].update(render_status(state))
    return layout
