"""
The acquisition core: what to fetch from the device, and when.

- ConfigStore: last-known-good settings for both configuration domains
- AcquisitionScheduler: sample polling cadence, single-flight guard, mode
- SignalStatusPoller: independent signal-generator status polling
- SampleBufferAdapter: fixed-shape render buffers from raw frames

See Also
--------
scopesync.session : Wires these together with a gateway and sinks
"""

from .sample_buffer import SampleBufferAdapter
from .scheduler import AcquisitionScheduler, SchedulerState
from .signal_poller import SignalStatusPoller, derive_signal_display, signal_voltage
from .store import ConfigStore

__all__ = [
    "AcquisitionScheduler",
    "ConfigStore",
    "SampleBufferAdapter",
    "SchedulerState",
    "SignalStatusPoller",
    "derive_signal_display",
    "signal_voltage",
]
