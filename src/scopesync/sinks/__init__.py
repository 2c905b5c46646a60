"""
Reference sinks for headless use.

`LogStatusSink` and `LogRenderSink` write to the loguru logger and remember
the last thing they were given, which is also what the tests inspect. For a
live plot see `scopesync.sinks.mpl.MplRenderSink`.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
from loguru import logger

from scopesync.types import AcqMode, AcquisitionSettings


class LogStatusSink:
    def __init__(self):
        self.connected: Optional[bool] = None
        self.signal_enabled: bool = False
        self.signal_label: str = ""
        self.mode: Optional[AcqMode] = None
        self.acquisition: Optional[AcquisitionSettings] = None

    def set_connected(self, connected: bool) -> None:
        if connected != self.connected:
            logger.info("Device {}", "connected" if connected else "disconnected")
        self.connected = connected

    def set_signal(self, enabled: bool, label: str) -> None:
        if (enabled, label) != (self.signal_enabled, self.signal_label):
            logger.info("Signal {}: {}", "ON" if enabled else "OFF", label)
        self.signal_enabled = enabled
        self.signal_label = label

    def set_mode(self, mode: AcqMode) -> None:
        logger.info("Mode: {}", AcqMode(mode).label)
        self.mode = AcqMode(mode)

    def set_acquisition(self, settings: AcquisitionSettings) -> None:
        logger.info(
            "Samples: {}, sample rate: {}µs, update: {} ms",
            settings.num_samples,
            settings.sample_rate,
            settings.web_update,
        )
        self.acquisition = settings


class LogRenderSink:
    """Logs a per-channel summary of each frame."""

    def __init__(self):
        self.labels: np.ndarray = np.arange(0)
        self.buffers: list[np.ndarray] = []
        self.frames = 0

    def update(self, labels: np.ndarray, buffers: Sequence[np.ndarray]) -> None:
        self.labels = labels
        self.buffers = list(buffers)
        self.frames += 1
        means = ", ".join(
            f"CH{i + 1}={np.mean(b):.0f}" if len(b) else f"CH{i + 1}=-"
            for i, b in enumerate(self.buffers)
        )
        logger.debug("Frame {}: {}", self.frames, means)

    def close(self) -> None:
        pass


__all__ = ["LogRenderSink", "LogStatusSink"]
