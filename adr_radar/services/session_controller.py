"""Session Controller — imperative shell around the pure session transitions.

Invariants:
    - Results are folded into self.state after their IO completes, so keys queued
      by a concurrent dispatch during a write are kept and replayed
    - Every effect returned by the core is executed, in order, including follow-ups
    - Collaborator failures become status messages; the session never crashes on them
    - The store is reached only from here and from the Sync Protocol

Design Decisions:
    - Effects drained through a local deque: follow-up effects (Refresh after Submit,
      replayed keys) run before control returns to the event loop
    - Settings applied to the writer as soon as they are persisted; DATABASE_NAME
      takes effect on the next start
"""

import logging
import time
from collections import deque
from typing import Callable

from adr_radar.core.domain_types import AdrId
from adr_radar.core.errors import RadarError
from adr_radar.core.repository_protocols import RecordStore
from adr_radar.core.session_state import (
    Effect, Event, PersistSetting, Refresh, RelinkAdr, RewriteDocument,
    SessionState, Submit,
)
from adr_radar.core.transitions import (
    Transition, apply_settings, apply_snapshot, apply_sync_result,
    handle_event, report_error,
)
from adr_radar.services.sync_protocol import SyncProtocol

logger = logging.getLogger(__name__)


class SessionController:
    """Owns the SessionState and executes the effects the core asks for."""

    def __init__(
        self,
        protocol: SyncProtocol,
        store: RecordStore,
        clock: Callable[[], float] = time.monotonic,
        defaults: dict[str, str] | None = None,
    ):
        self.protocol = protocol
        self.store = store
        self.clock = clock
        self._defaults = dict(defaults or {})
        now = clock()
        self.state = SessionState(started_at=now, now=now)

    async def start(self) -> SessionState:
        """Load persisted settings and the first snapshot."""
        try:
            persisted = await self.store.get_settings()
        except RadarError as e:
            self.state, _ = report_error(self.state, e)
            persisted = {}
        self._apply_directories(persisted)
        self.state = apply_settings(self.state, {**self._defaults, **persisted})
        await self._drain([Refresh()])
        logger.info(
            f"Session started with {len(self.state.blips)} blips "
            f"and {len(self.state.adrs)} ADRs",
        )
        return self.state

    async def dispatch(self, event: Event) -> SessionState:
        """Feed one event through the core and run the resulting effects."""
        self.state, effects = handle_event(self.state, event)
        await self._drain(effects)
        return self.state

    # ─── Effect Execution ────────────────────────────────────────

    async def _drain(self, effects: list[Effect]) -> None:
        queue: deque[Effect] = deque(effects)
        while queue:
            effect = queue.popleft()
            try:
                self.state, more = await self._execute(effect)
            except RadarError as e:
                logger.error(
                    f"Effect {type(effect).__name__} failed: {e.message}",
                    extra={"error_code": e.code},
                )
                self.state, more = report_error(self.state, e)
            queue.extend(more)

    async def _execute(self, effect: Effect) -> Transition:
        if isinstance(effect, Submit):
            result = await self.protocol.submit(effect.request)
            return apply_sync_result(self.state, result)
        if isinstance(effect, RewriteDocument):
            result = await self.protocol.rewrite_document(effect.kind, effect.record_id)
            return apply_sync_result(self.state, result)
        if isinstance(effect, RelinkAdr):
            result = await self.protocol.relink_adr(AdrId(effect.adr_id))
            return apply_sync_result(self.state, result)
        if isinstance(effect, Refresh):
            blips = await self.store.list_blips()
            adrs = await self.store.list_adrs()
            return apply_snapshot(self.state, blips, adrs), []
        if isinstance(effect, PersistSetting):
            await self.store.set_setting(effect.key, effect.value)
            self._apply_directories({effect.key: effect.value})
            return self.state, []
        logger.warning(f"Unknown effect ignored: {effect!r}")
        return self.state, []

    def _apply_directories(self, values: dict[str, str]) -> None:
        adr_dir, blip_dir = values.get("ADR_DIR"), values.get("BLIP_DIR")
        if adr_dir or blip_dir:
            self.protocol.writer.set_directories(adr_dir, blip_dir)
