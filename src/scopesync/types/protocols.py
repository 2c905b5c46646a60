"""Protocols for the collaborators the acquisition core talks to.

The core never imports a concrete sink. Anything that implements these
methods (a GUI widget, a matplotlib figure, a logger) can be plugged in.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from .config import AcqMode, AcquisitionSettings


@runtime_checkable
class RenderSink(Protocol):
    """Consumes normalized frames; trusted to redraw."""

    def update(self, labels: np.ndarray, buffers: Sequence[np.ndarray]) -> None:
        """Replace the displayed frame.

        `buffers` always has one entry per render channel.
        """
        ...

    def close(self) -> None: ...


@runtime_checkable
class StatusSink(Protocol):
    """Receives connection, mode and signal-generator status."""

    def set_connected(self, connected: bool) -> None: ...

    def set_signal(self, enabled: bool, label: str) -> None: ...

    def set_mode(self, mode: AcqMode) -> None: ...

    def set_acquisition(self, settings: AcquisitionSettings) -> None: ...
