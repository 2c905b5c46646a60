"""
Acquisition scheduler: polling cadence, single-flight guard and mode.

States
------
- Idle: no timer.
- Polling(mode): a timer ticks every `web_update` ms.

`mode` is orthogonal to the timer. In CONTINUOUS mode each tick tries to
fetch a frame; in SNAPSHOT mode ticks fetch nothing and a frame is only
fetched on an explicit capture request.

Single flight
-------------
At most one `/data` request is outstanding. `capturing` is set synchronously
before the fetch task is created, so a tick or capture request arriving while
it is set is dropped (not queued). It is cleared in a `finally`, so one
failed fetch can never stall the poller.

Re-arm
------
`rearm()` cancels the current timer and starts a new one at the period read
from the ConfigStore at that moment, never below MIN_POLL_PERIOD_MS, so any
committed `web_update` leaves a live timer. A cancelled timer never fires again.
In-flight fetches are not cancelled; their result is applied when it lands.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from scopesync.types import AcqMode, CommsError, RenderSink, StatusSink
from scopesync.util import TaskGroup, TimerHandle, start_timer

from .sample_buffer import SampleBufferAdapter
from .store import ConfigStore


@dataclass
class SchedulerState:
    """Mutable scheduler state. Written only by AcquisitionScheduler methods."""

    mode: AcqMode = AcqMode.CONTINUOUS
    capturing: bool = False
    timer: Optional[TimerHandle] = None
    period_ms: Optional[int] = None
    fetches: int = 0
    dropped: int = 0


class AcquisitionScheduler:
    def __init__(
        self,
        store: ConfigStore,
        gateway,
        adapter: SampleBufferAdapter,
        render_sink: RenderSink,
        status_sink: StatusSink,
        timer_factory: Callable[[float, Callable[[], None]], TimerHandle] = start_timer,
        mode: AcqMode = AcqMode.CONTINUOUS,
    ):
        self.store = store
        self.gateway = gateway
        self.adapter = adapter
        self.render_sink = render_sink
        self.status_sink = status_sink
        self._timer_factory = timer_factory
        self.state = SchedulerState(mode=mode)
        self._fetch_tasks = TaskGroup()
        self._notify_tasks = TaskGroup()

    # ----------------------------------------------------------------------------------
    # State
    # ----------------------------------------------------------------------------------

    @property
    def mode(self) -> AcqMode:
        return self.state.mode

    @property
    def capturing(self) -> bool:
        return self.state.capturing

    @property
    def is_polling(self) -> bool:
        return self.state.timer is not None

    # ----------------------------------------------------------------------------------
    # Timer
    # ----------------------------------------------------------------------------------

    def start(self) -> None:
        self.rearm()

    def stop(self) -> None:
        """Back to Idle. An in-flight fetch is left to complete."""
        if self.state.timer is not None:
            self.state.timer.cancel()
            self.state.timer = None
            self.state.period_ms = None
            logger.info("Acquisition polling stopped.")

    def rearm(self) -> None:
        """Cancel the current timer and start one at the store's cadence."""
        period_ms = self.store.poll_period_ms
        if self.state.timer is not None:
            self.state.timer.cancel()
            self.state.timer = None
        self.state.timer = self._timer_factory(period_ms / 1000.0, self._on_tick)
        self.state.period_ms = period_ms
        logger.info(
            "Acquisition polling every {} ms ({})", period_ms, self.state.mode.label
        )

    def _on_tick(self) -> None:
        if self.state.mode is AcqMode.CONTINUOUS:
            self.request_capture()

    # ----------------------------------------------------------------------------------
    # Capture
    # ----------------------------------------------------------------------------------

    def request_capture(self) -> Optional[asyncio.Task]:
        """Start one fetch unless one is already in flight.

        Returns
        -------
        asyncio.Task | None
            The fetch task, or None if the request was dropped.
        """
        if self.state.capturing:
            self.state.dropped += 1
            logger.trace("Capture in flight, dropping request.")
            return None
        self.state.capturing = True
        return self._fetch_tasks.spawn(self._fetch(), name="acquisition-fetch")

    async def capture(self) -> bool:
        """Explicit capture, e.g. the user's "capture" button in snapshot mode.

        Returns False if it was dropped because a fetch was already in flight.
        """
        task = self.request_capture()
        if task is None:
            return False
        await task
        return True

    async def _fetch(self) -> None:
        try:
            self.state.fetches += 1
            payload = await self.gateway.fetch_samples()
            if self.adapter.update(payload):
                self.render_sink.update(*self.adapter.frame())
            self.status_sink.set_connected(True)
        except CommsError as e:
            logger.error("Error fetching samples: {}", e)
            self.status_sink.set_connected(False)
        finally:
            self.state.capturing = False

    # ----------------------------------------------------------------------------------
    # Mode
    # ----------------------------------------------------------------------------------

    def toggle_mode(self) -> AcqMode:
        return self.set_mode(self.state.mode.flipped())

    def set_mode(self, mode: AcqMode) -> AcqMode:
        """Switch mode locally and tell the device, without waiting for it."""
        self.state.mode = AcqMode(mode)
        self.status_sink.set_mode(self.state.mode)
        self._notify_tasks.spawn(self._notify_mode(self.state.mode), name="set-mode")
        return self.state.mode

    async def _notify_mode(self, mode: AcqMode) -> None:
        try:
            await self.gateway.set_mode(mode)
            logger.info("Mode: {}", mode.value)
        except CommsError as e:
            logger.error("Error setting mode: {}", e)

    async def drain(self) -> None:
        """Wait for in-flight fetches and mode notifications."""
        await self._fetch_tasks.drain()
        await self._notify_tasks.drain()
