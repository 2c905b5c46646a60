"""Normalize raw `/data` payloads into a fixed set of render buffers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Optional

import numpy as np
from loguru import logger

from scopesync.util import NUM_CHANNELS


def _as_channel(entry: Any) -> Optional[np.ndarray]:
    """A 1D float array, or None if `entry` is not a sequence of numbers."""
    if isinstance(entry, (str, bytes)) or not isinstance(entry, (Sequence, np.ndarray)):
        return None
    try:
        arr = np.asarray(entry, dtype=float)
    except (TypeError, ValueError):
        return None
    if arr.ndim != 1:
        return None
    return arr


class SampleBufferAdapter:
    """Owns the render buffers: always `num_channels` of them.

    A frame only ever replaces channels it carries well-formed data for. A
    malformed channel entry leaves that channel's previous data in place and
    does not affect the other channels; a payload without a `channels` list
    changes nothing.
    """

    def __init__(self, num_samples: int, num_channels: int = NUM_CHANNELS):
        self.num_channels = num_channels
        self.labels: np.ndarray = np.arange(0)
        self.buffers: list[np.ndarray] = []
        self.reset(num_samples)

    def reset(self, num_samples: int) -> None:
        """Zero every channel at `num_samples` points."""
        num_samples = max(int(num_samples), 0)
        self.labels = np.arange(num_samples)
        self.buffers = [np.zeros(num_samples) for _ in range(self.num_channels)]

    def update(self, payload: Any) -> bool:
        """Apply one raw payload.

        Returns
        -------
        bool
            False if the payload was not recognizable and nothing changed.
        """
        if not isinstance(payload, Mapping):
            logger.warning("Ignoring frame: payload is {}", type(payload).__name__)
            return False
        channels = payload.get("channels")
        if not isinstance(channels, Sequence) or isinstance(channels, (str, bytes)):
            logger.warning("Ignoring frame: no channel list")
            return False

        for i in range(self.num_channels):
            if i >= len(channels):
                break
            arr = _as_channel(channels[i])
            if arr is None:
                logger.warning("Ignoring malformed data for CH{}", i + 1)
                continue
            self.buffers[i] = arr
        if len(channels) > self.num_channels:
            logger.trace(
                "Frame has {} channels, using first {}",
                len(channels),
                self.num_channels,
            )
        return True

    def frame(self) -> tuple[np.ndarray, list[np.ndarray]]:
        return self.labels, list(self.buffers)
