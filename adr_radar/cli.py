"""CLI entry point for adr-radar."""

import asyncio
import json
import os
from typing import Annotated

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from adr_radar.config import Settings, database_url_for, get_settings
from adr_radar.core.radar_stats import RadarStats, summarize
from adr_radar.infrastructure.database import open_database
from adr_radar.infrastructure.document_writer import MarkdownDocumentWriter
from adr_radar.infrastructure.observability import setup_logging
from adr_radar.infrastructure.record_store import SqlRecordStore
from adr_radar.services.session_controller import SessionController
from adr_radar.services.sync_protocol import SyncProtocol

app = typer.Typer(
    name="adr-radar",
    help="Architectural Decision Records and a live Tech Radar in the terminal.",
)

DEFAULT_TUI_LOG = "adr-radar.log"

# Global option overrides, filled by the callback
_overrides: dict[str, object] = {}


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    db: Annotated[
        str | None, typer.Option("--db", help="SQLite file or database URL")
    ] = None,
    adr_dir: Annotated[
        str | None, typer.Option("--adr-dir", help="Directory for ADR documents")
    ] = None,
    blip_dir: Annotated[
        str | None, typer.Option("--blip-dir", help="Directory for blip documents")
    ] = None,
    debug: Annotated[bool, typer.Option("--debug", help="Log at DEBUG level")] = False,
) -> None:
    """Global options. Without a command, starts the interactive radar."""
    _overrides.clear()
    if db:
        _overrides["database_url"] = database_url_for(db)
        _overrides["follow_database_name"] = False
    if adr_dir:
        _overrides["adr_dir"] = adr_dir
    if blip_dir:
        _overrides["blip_dir"] = blip_dir
    if debug:
        _overrides["log_level"] = "DEBUG"
    if ctx.invoked_subcommand is None:
        tui()


def _settings() -> Settings:
    return get_settings().model_copy(update=_overrides)


def _build_writer(settings: Settings) -> MarkdownDocumentWriter:
    return MarkdownDocumentWriter(
        settings.adr_dir, settings.blip_dir, settings.author_name,
    )


# ─── tui ─────────────────────────────────────────────────────────

@app.command()
def tui() -> None:
    """Interactive radar: browse, add and edit blips and ADRs."""
    from adr_radar.shell.event_loop import run_session

    settings = _settings()
    setup_logging(
        settings.log_level, settings.log_format, settings.log_file or DEFAULT_TUI_LOG,
    )

    async def _run() -> None:
        manager = await open_database(settings)
        store = SqlRecordStore(manager)
        protocol = SyncProtocol(store, _build_writer(settings))
        defaults = {
            "ADR_DIR": settings.adr_dir,
            "BLIP_DIR": settings.blip_dir,
            "DATABASE_NAME": str(manager.engine.url),
        }
        controller = SessionController(protocol, store, defaults=defaults)
        try:
            await run_session(
                controller,
                tick_interval_s=settings.tick_interval_ms / 1000.0,
                period_s=settings.sweep_period_seconds,
            )
        finally:
            await manager.dispose()

    asyncio.run(_run())


# ─── headless ────────────────────────────────────────────────────

def _display_stats(stats: RadarStats) -> None:
    table = Table(title="Radar Summary", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Blips", str(stats.total_blips))
    table.add_row("ADRs", str(stats.total_adrs))
    table.add_row("Blips with ADR", str(stats.linked_blips))
    coverage = "-" if stats.coverage is None else f"{stats.coverage:.1f}%"
    table.add_row("ADR coverage", coverage)
    table.add_row("Unclassified", str(stats.unclassified))
    for quadrant, count in stats.by_quadrant.items():
        table.add_row(f"Quadrant: {quadrant}", str(count))
    for ring, count in stats.by_ring.items():
        table.add_row(f"Ring: {ring}", str(count))
    rprint(table)

    if stats.recent:
        recent = Table(title="Most Recent Blips", show_header=False)
        recent.add_column("Name", style="green")
        for name in stats.recent:
            recent.add_row(name)
        rprint(recent)


@app.command()
def headless(
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON instead of tables")] = False,
) -> None:
    """Print radar statistics without starting the interactive UI."""
    settings = _settings()
    setup_logging(settings.log_level, settings.log_format, settings.log_file)

    async def _collect() -> RadarStats:
        manager = await open_database(settings)
        try:
            store = SqlRecordStore(manager)
            return summarize(await store.list_blips(), await store.list_adrs())
        finally:
            await manager.dispose()

    stats = asyncio.run(_collect())
    if as_json:
        typer.echo(json.dumps(stats.to_dict(), indent=2))
    else:
        _display_stats(stats)


# ─── serve ───────────────────────────────────────────────────────

@app.command()
def serve(
    host: Annotated[str | None, typer.Option(help="Bind address")] = None,
    port: Annotated[int | None, typer.Option(help="Port")] = None,
) -> None:
    """Run the snapshot API."""
    import uvicorn

    settings = _settings()
    # The API process reads its settings from the environment
    for key, value in _overrides.items():
        os.environ[f"ADR_RADAR_{key.upper()}"] = str(value)
    get_settings.cache_clear()
    Console(stderr=True).print(
        f"[bold cyan]adr-radar API[/bold cyan] on "
        f"http://{host or settings.api_host}:{port or settings.api_port}",
    )
    uvicorn.run(
        "adr_radar.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    app()
