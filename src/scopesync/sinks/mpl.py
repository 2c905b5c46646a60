"""Matplotlib line plot of the six channels."""

from __future__ import annotations

from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np
from loguru import logger

from scopesync.util import ADC_MAX, NUM_CHANNELS


class MplRenderSink:
    """One line per channel, redrawn in place on each frame.

    Draws with `draw_idle` + `flush_events` so it can be driven from the
    asyncio loop without a blocking `plt.show()`.
    """

    def __init__(self, num_channels: int = NUM_CHANNELS, title: str = "scopesync"):
        plt.ion()
        self.fig, self.ax = plt.subplots(figsize=(10, 6))
        self.fig.canvas.manager.set_window_title(title)
        self.lines = [
            self.ax.plot([], [], label=f"CH{i + 1}", linewidth=1.5)[0]
            for i in range(num_channels)
        ]
        self.ax.set_xlabel("Sample Number")
        self.ax.set_ylabel(f"ADC Value (0-{ADC_MAX})")
        self.ax.set_ylim(0, ADC_MAX)
        self.ax.legend(loc="upper right")
        self.fig.tight_layout()

    def update(self, labels: np.ndarray, buffers: Sequence[np.ndarray]) -> None:
        xmax = 0
        for line, buf in zip(self.lines, buffers):
            n = min(len(labels), len(buf))
            line.set_data(labels[:n], buf[:n])
            xmax = max(xmax, n)
        self.ax.set_xlim(0, max(xmax - 1, 1))
        self.fig.canvas.draw_idle()
        self.fig.canvas.flush_events()

    def close(self) -> None:
        logger.debug("Closing plot window.")
        plt.close(self.fig)
