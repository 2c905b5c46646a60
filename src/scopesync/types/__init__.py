"""
Records, presets, collaborator protocols and exceptions.

The scopesync.types package holds everything the other packages share:

1. Settings and status records
    - AcquisitionSettings and SignalSettings, the two configuration domains
    - SignalStatus, the device's live signal-generator report
    - (De)serialization to the device's camelCase JSON via mashumaro

2. Collaborator protocols
    - RenderSink and StatusSink, implemented outside the acquisition core

3. Exceptions
    - CommsError and its two subclasses, TransportError and ProtocolError

Examples
--------
Building settings and their wire form:
```python
from scopesync.types import AcquisitionSettings
settings = AcquisitionSettings(num_samples=200, web_update=250)
settings.to_dict()  # {'numSamples': 200, ..., 'webUpdate': 250}
```

Handling gateway errors:
```python
from scopesync.types import CommsError, TransportError
try:
    await gateway.fetch_samples()
except TransportError as e:
    print(e.endpoint, e.status)
```

See Also
--------
scopesync.device.gateway : Where the exceptions are raised
scopesync.types.validation : Range and shape checks
"""

from __future__ import annotations

from typing import Optional

from .config import (
    DEFAULT_ACQUISITION,
    DEFAULT_SIGNAL,
    WAVEFORM_LABELS,
    AcqMode,
    AcquisitionSettings,
    SignalDisplay,
    SignalSettings,
    SignalStatus,
    WaveformType,
)
from .presets import (
    ACQUISITION_PRESETS,
    DEFAULT_ACQUISITION_PRESET,
    SIGNAL_PRESETS,
    AcquisitionPreset,
    SignalPreset,
    find_preset,
)
from .protocols import RenderSink, StatusSink
from .validation import (
    ValidationError,
    validate_acquisition_settings,
    validate_record_shape,
    validate_signal_settings,
)


# Exceptions
class CommsError(Exception):
    """Base exception for device communication errors."""

    def __init__(self, endpoint: str, message: str):
        super().__init__(message)
        self.endpoint = endpoint


class TransportError(CommsError):
    """Network failure or non-2xx HTTP status from the device."""

    def __init__(self, endpoint: str, status: Optional[int] = None, detail: str = ""):
        if status is not None:
            msg = f"{endpoint}: HTTP {status}"
        else:
            msg = f"{endpoint}: transport failure"
        if detail:
            msg += f" ({detail})"
        super().__init__(endpoint, msg)
        self.status = status


class ProtocolError(CommsError):
    """Malformed or unexpected payload from the device."""

    def __init__(self, endpoint: str, reason: str):
        super().__init__(endpoint, f"{endpoint}: bad payload ({reason})")
        self.reason = reason


__all__ = [
    "AcqMode",
    "AcquisitionSettings",
    "SignalSettings",
    "SignalStatus",
    "SignalDisplay",
    "WaveformType",
    "WAVEFORM_LABELS",
    "DEFAULT_ACQUISITION",
    "DEFAULT_SIGNAL",
    "AcquisitionPreset",
    "SignalPreset",
    "ACQUISITION_PRESETS",
    "SIGNAL_PRESETS",
    "DEFAULT_ACQUISITION_PRESET",
    "find_preset",
    "RenderSink",
    "StatusSink",
    "ValidationError",
    "validate_acquisition_settings",
    "validate_signal_settings",
    "validate_record_shape",
    "CommsError",
    "TransportError",
    "ProtocolError",
]
