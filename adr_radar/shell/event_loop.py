"""Event Loop — one asyncio loop feeding keys and ticks to the session controller.

Invariants:
    - Events are dispatched in arrival order
    - While a write is in flight, keys still reach the core, which queues
      quit/cancel and drops the rest; nothing typed then is applied afterwards
    - Keys that arrive during a non-write dispatch wait for it to finish
    - The ticker only enqueues; it never touches state
    - The terminal mode and screen are restored however the loop ends
"""

import asyncio
import logging
from collections import deque
from typing import Callable

from rich.console import Console
from rich.live import Live

from adr_radar.core.session_state import Event, Tick
from adr_radar.services.session_controller import SessionController
from adr_radar.shell.render import render_session
from adr_radar.shell.terminal import (
    attach_key_reader, cbreak_terminal, detach_key_reader,
)

logger = logging.getLogger(__name__)


async def _ticker(
    queue: asyncio.Queue, controller: SessionController, interval_s: float,
) -> None:
    while True:
        await asyncio.sleep(interval_s)
        queue.put_nowait(Tick(controller.clock()))


async def pump_events(
    controller: SessionController,
    queue: asyncio.Queue,
    on_update: Callable[[], None] = lambda: None,
) -> None:
    """Dispatch queued events until the session exits.

    Each dispatch runs as a task so input keeps flowing while a write is
    awaited. Arrivals during that time go straight to the controller when the
    state is submitting (ticks always do); otherwise they are held back and
    dispatched next.
    """
    backlog: deque[Event] = deque()
    while controller.state.running:
        event = backlog.popleft() if backlog else await queue.get()
        dispatch = asyncio.create_task(controller.dispatch(event))
        while not dispatch.done():
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait(
                {dispatch, getter}, return_when=asyncio.FIRST_COMPLETED,
            )
            if getter not in done:
                getter.cancel()
                continue
            arrived = getter.result()
            if isinstance(arrived, Tick) or controller.state.submitting:
                await controller.dispatch(arrived)
                on_update()
            else:
                backlog.append(arrived)
        await dispatch
        on_update()


async def run_session(
    controller: SessionController,
    tick_interval_s: float = 0.1,
    period_s: float = 4.0,
    console: Console | None = None,
) -> None:
    """Run the interactive session until the user quits."""
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[Event] = asyncio.Queue()
    await controller.start()

    with cbreak_terminal() as fd, Live(
        render_session(controller.state, period_s),
        console=console, screen=True, auto_refresh=False,
    ) as live:
        attach_key_reader(loop, fd, queue)
        ticker = asyncio.create_task(_ticker(queue, controller, tick_interval_s))
        try:
            await pump_events(
                controller, queue,
                lambda: live.update(
                    render_session(controller.state, period_s), refresh=True,
                ),
            )
        finally:
            ticker.cancel()
            detach_key_reader(loop, fd)
    logger.info("Session ended")
