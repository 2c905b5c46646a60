"""
A client session against one device.

This class wires the acquisition core to a gateway and the two sinks, and
implements the user-level flows: startup, applying either settings domain,
presets, signal on/off and single pulse, mode toggle, capture and clear.

Every flow follows the same rule for device state: the device is told
first, and the local ConfigStore is only committed once the device has
confirmed. A failed apply leaves the store and the polling cadence as they
were.

Examples
--------
```python
async with DeviceGateway.from_host("192.168.4.1", timeout=5) as gw:
    session = ScopeSession(gw, LogRenderSink(), LogStatusSink())
    await session.start()
    await session.apply_preset("High Speed")
    ...
    await session.stop()
```
"""

from __future__ import annotations

import asyncio
import dataclasses
from typing import Callable, Optional, Union

from loguru import logger

from scopesync.acq import (
    AcquisitionScheduler,
    ConfigStore,
    SampleBufferAdapter,
    SignalStatusPoller,
    derive_signal_display,
)
from scopesync.types import (
    ACQUISITION_PRESETS,
    DEFAULT_ACQUISITION_PRESET,
    SIGNAL_PRESETS,
    AcqMode,
    AcquisitionSettings,
    CommsError,
    RenderSink,
    SignalSettings,
    SignalStatus,
    StatusSink,
    find_preset,
)
from scopesync.util import (
    FIRST_CAPTURE_DELAY,
    PULSE_STATUS_DELAY,
    STARTUP_DELAY,
    TimerHandle,
    start_timer,
)


class ScopeSession:
    def __init__(
        self,
        gateway,
        render_sink: RenderSink,
        status_sink: StatusSink,
        store: Optional[ConfigStore] = None,
        timer_factory: Callable[[float, Callable[[], None]], TimerHandle] = start_timer,
        mode: AcqMode = AcqMode.CONTINUOUS,
    ):
        self.gateway = gateway
        self.render_sink = render_sink
        self.status_sink = status_sink
        self.store = store if store is not None else ConfigStore()
        self.adapter = SampleBufferAdapter(self.store.acquisition.num_samples)
        self.scheduler = AcquisitionScheduler(
            self.store,
            gateway,
            self.adapter,
            render_sink,
            status_sink,
            timer_factory=timer_factory,
            mode=mode,
        )
        self.status_poller = SignalStatusPoller(
            self.store, gateway, status_sink, timer_factory=timer_factory
        )
        self._pending: list[asyncio.TimerHandle] = []

    # ----------------------------------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------------------------------

    async def start(
        self,
        startup_delay: float = STARTUP_DELAY,
        first_capture_delay: float = FIRST_CAPTURE_DELAY,
    ) -> None:
        """Load both settings domains from the device, then start polling.

        A failed config fetch keeps the current (default) settings.
        """
        await asyncio.sleep(startup_delay)
        await asyncio.gather(
            self.fetch_current_config(), self.fetch_current_signal_config()
        )
        self.adapter.reset(self.store.acquisition.num_samples)
        self.render_sink.update(*self.adapter.frame())
        self.status_sink.set_mode(self.scheduler.mode)
        self.status_sink.set_connected(True)
        self.scheduler.start()
        self.status_poller.start()
        self._call_later(first_capture_delay, self._first_capture)

    def _call_later(self, delay: float, callback: Callable[[], object]) -> None:
        loop = asyncio.get_running_loop()
        now = loop.time()
        self._pending = [h for h in self._pending if h.when() > now]
        self._pending.append(loop.call_later(delay, callback))

    def _first_capture(self) -> None:
        self.scheduler.request_capture()
        self.status_poller.request_poll()

    async def stop(self) -> None:
        """Stop both timers and wait for requests already in flight."""
        for handle in self._pending:
            handle.cancel()
        self._pending.clear()
        self.scheduler.stop()
        self.status_poller.stop()
        await self.scheduler.drain()
        await self.status_poller.drain()

    # ----------------------------------------------------------------------------------
    # Acquisition settings
    # ----------------------------------------------------------------------------------

    async def fetch_current_config(self) -> Optional[AcquisitionSettings]:
        try:
            settings = await self.gateway.fetch_acquisition_config()
        except CommsError as e:
            logger.error("Error fetching config: {}", e)
            return None
        self.store.commit_acquisition(settings)
        self.status_sink.set_acquisition(settings)
        return settings

    async def apply_settings(self, settings: AcquisitionSettings) -> bool:
        """Send acquisition settings; on success commit and re-arm polling."""
        try:
            await self.gateway.apply_acquisition_config(settings)
        except CommsError as e:
            logger.error("Failed to apply settings: {}", e)
            return False

        self.store.commit_acquisition(settings)
        self.status_sink.set_acquisition(settings)
        self.adapter.reset(settings.num_samples)
        self.render_sink.update(*self.adapter.frame())
        self.scheduler.rearm()
        self.status_poller.rearm()
        logger.info("Settings applied successfully")
        return True

    async def apply_preset(self, key: Union[int, str]) -> bool:
        preset = find_preset(ACQUISITION_PRESETS, key)
        logger.info("Applying preset '{}'", preset.name)
        return await self.apply_settings(preset.settings)

    async def reset_to_defaults(self) -> bool:
        return await self.apply_preset(DEFAULT_ACQUISITION_PRESET)

    # ----------------------------------------------------------------------------------
    # Signal generator
    # ----------------------------------------------------------------------------------

    async def fetch_current_signal_config(self) -> Optional[SignalSettings]:
        try:
            settings = await self.gateway.fetch_signal_config()
        except CommsError as e:
            logger.error("Error fetching signal config: {}", e)
            return None
        self.store.commit_signal(settings)
        return settings

    async def apply_signal_settings(self, settings: SignalSettings) -> bool:
        """Send signal settings; on success commit and refresh the status."""
        try:
            await self.gateway.apply_signal_config(settings)
        except CommsError as e:
            logger.error("Failed to apply signal settings: {}", e)
            return False
        self.store.commit_signal(settings)
        logger.info("Signal settings applied successfully")
        await self.status_poller.poll()
        return True

    async def apply_signal_preset(self, key: Union[int, str]) -> bool:
        preset = find_preset(SIGNAL_PRESETS, key)
        logger.info("Applying signal preset '{}'", preset.name)
        return await self.apply_signal_settings(preset.resolve(self.store.signal))

    async def toggle_signal(self) -> Optional[bool]:
        """Flip the generator. Returns the new state, or None on failure."""
        try:
            enabled = await self.gateway.toggle_signal()
        except CommsError as e:
            logger.error("Error toggling signal: {}", e)
            return None
        last = self.status_poller.last_status
        if last is not None:
            shown = dataclasses.replace(last, enabled=enabled)
        else:
            # nothing polled yet, describe the committed generator settings
            s = self.store.signal
            shown = SignalStatus(
                enabled=enabled,
                waveform_type=s.waveform_type,
                amplitude=s.amplitude,
                frequency=s.frequency,
                duty_cycle=s.duty_cycle,
            )
        self.status_sink.set_signal(enabled, derive_signal_display(shown).label)
        await self.status_poller.poll()
        return enabled

    async def send_single_pulse(self) -> bool:
        try:
            await self.gateway.send_single_pulse()
        except CommsError as e:
            logger.error("Error sending pulse: {}", e)
            return False
        logger.info("Single pulse sent")
        self._call_later(PULSE_STATUS_DELAY, self.status_poller.request_poll)
        return True

    # ----------------------------------------------------------------------------------
    # Acquisition control
    # ----------------------------------------------------------------------------------

    def toggle_mode(self) -> AcqMode:
        return self.scheduler.toggle_mode()

    async def capture(self) -> bool:
        return await self.scheduler.capture()

    def clear(self) -> None:
        """Zero every channel and redraw."""
        self.adapter.reset(self.store.acquisition.num_samples)
        self.render_sink.update(*self.adapter.frame())
