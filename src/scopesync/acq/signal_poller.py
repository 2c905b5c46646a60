"""Independent polling loop for the signal generator's live status."""

from __future__ import annotations

import asyncio
from decimal import ROUND_DOWN, Decimal
from typing import Callable, Optional

from loguru import logger

from scopesync.types import (
    CommsError,
    SignalDisplay,
    SignalStatus,
    StatusSink,
    WaveformType,
)
from scopesync.util import (
    SIGNAL_AMPLITUDE_MAX,
    SIGNAL_VREF,
    TaskGroup,
    TimerHandle,
    start_timer,
)

from .store import ConfigStore


def signal_voltage(amplitude: int) -> str:
    """Output voltage for an amplitude code, in 10 mV steps.

    Truncated toward zero on purpose, not rounded half-up: amplitude 128 reads
    "1.65" (1.6565 V) and 200 reads "2.58" (2.5882 V).
    """
    vref = Decimal(str(SIGNAL_VREF))
    volts = Decimal(amplitude) * vref / Decimal(SIGNAL_AMPLITUDE_MAX)
    return str(volts.quantize(Decimal("0.01"), rounding=ROUND_DOWN))


def derive_signal_display(status: SignalStatus) -> SignalDisplay:
    """Human-readable state and label for a status report.

    DC needs only the voltage, PWM also shows frequency and duty cycle.
    """
    voltage = signal_voltage(status.amplitude)
    if not status.enabled:
        return SignalDisplay(False, "OFF", voltage, "No Signal")

    waveform = status.waveform
    if waveform is WaveformType.DC:
        label = f"DC {voltage}V"
    elif waveform is WaveformType.PWM:
        label = f"PWM {status.frequency}Hz {status.duty_cycle}% ({voltage}V)"
    else:
        if waveform is not None:
            name = waveform.label
        else:
            name = f"Waveform {status.waveform_type}"
        label = f"{name} {status.frequency}Hz ({voltage}V)"
    return SignalDisplay(True, "ON", voltage, label)


class SignalStatusPoller:
    """Polls `/getSignalStatus` on its own timer.

    Shares the cadence source (`web_update`) with the acquisition scheduler but
    is not gated by its capture guard. A failed poll keeps the last-known
    status: stale is shown rather than blank.
    """

    def __init__(
        self,
        store: ConfigStore,
        gateway,
        status_sink: StatusSink,
        timer_factory: Callable[[float, Callable[[], None]], TimerHandle] = start_timer,
    ):
        self.store = store
        self.gateway = gateway
        self.status_sink = status_sink
        self._timer_factory = timer_factory
        self._timer: Optional[TimerHandle] = None
        self._tasks = TaskGroup()
        self.last_status: Optional[SignalStatus] = None
        self.display: Optional[SignalDisplay] = None

    @property
    def is_polling(self) -> bool:
        return self._timer is not None

    def start(self) -> None:
        self.rearm()

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.info("Signal status polling stopped.")

    def rearm(self) -> None:
        """Replace the timer with one at the store's current cadence."""
        period = self.store.poll_period_ms / 1000.0
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._timer_factory(period, self._on_tick)
        logger.debug("Signal status polling every {:.3f}s", period)

    def _on_tick(self) -> None:
        self.request_poll()

    def request_poll(self) -> asyncio.Task:
        """Start a detached poll. Overlapping polls are harmless."""
        return self._tasks.spawn(self.poll(), name="signal-status-poll")

    async def poll(self) -> bool:
        """Fetch and publish the status once. Returns False on failure."""
        try:
            status = await self.gateway.fetch_signal_status()
        except CommsError as e:
            logger.error("Error fetching signal status: {}", e)
            return False
        self.last_status = status
        self.display = derive_signal_display(status)
        self.status_sink.set_signal(self.display.enabled, self.display.label)
        logger.trace("Signal status: {}", self.display)
        return True

    async def drain(self) -> None:
        await self._tasks.drain()
