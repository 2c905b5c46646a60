# -*- coding: utf-8 -*-
"""
Cancelable periodic timer on the asyncio event loop.

Ticks are laid on an absolute grid (``t0 + n * period``) so a slow callback
does not push later ticks back. A handle that has been cancelled never fires
again, even if its next callback was already queued on the loop.

Examples
--------
```python
handle = start_timer(0.5, on_tick)
...
handle.cancel()
handle = start_timer(1.0, on_tick)  # re-arm at a new period
```
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from loguru import logger


class TimerHandle:
    """Handle to a running periodic timer. Only ever cancelled, never restarted."""

    def __init__(
        self,
        period: float,
        on_tick: Callable[[], None],
        loop: asyncio.AbstractEventLoop,
    ):
        if period <= 0:
            raise ValueError(f"Timer period must be positive, got {period}")
        self.period = period
        self._on_tick = on_tick
        self._loop = loop
        self._cancelled = False
        self._next_deadline = loop.time() + period
        self._ticks = 0
        self._handle: Optional[asyncio.TimerHandle] = loop.call_at(
            self._next_deadline, self._fire
        )

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def ticks(self) -> int:
        """Number of ticks delivered so far."""
        return self._ticks

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        if self._cancelled:
            return
        # schedule the next tick before running the callback, skipping any
        # deadlines already missed (no burst of catch-up ticks)
        now = self._loop.time()
        self._next_deadline += self.period
        if self._next_deadline <= now:
            missed = int((now - self._next_deadline) // self.period) + 1
            self._next_deadline += missed * self.period
        self._handle = self._loop.call_at(self._next_deadline, self._fire)

        self._ticks += 1
        try:
            self._on_tick()
        except Exception:
            # a failing callback must not stop the timer
            logger.exception("Error in timer tick callback.")

    def __repr__(self):
        state = "cancelled" if self._cancelled else "running"
        return f"TimerHandle(period={self.period}, ticks={self._ticks}, {state})"


def start_timer(
    period: float,
    on_tick: Callable[[], None],
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> TimerHandle:
    """Start a periodic timer calling `on_tick` every `period` seconds.

    Parameters
    ----------
    period : float
        Tick period in seconds, must be positive.
    on_tick : Callable[[], None]
        Synchronous callback, run on the loop thread. Spawn a task from it
        for any I/O.
    loop : asyncio.AbstractEventLoop, optional
        Loop to schedule on, by default the running loop.

    Returns
    -------
    TimerHandle
        Handle whose `cancel()` stops all future ticks.
    """
    if loop is None:
        loop = asyncio.get_running_loop()
    return TimerHandle(period, on_tick, loop)
