"""Shape and range validation for settings and status records.

Range checks are advisory: the device is authoritative, so callers log a
failed range check and pass the value through. Shape checks (wrong Python
types in a record) are errors.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Union

from .config import AcquisitionSettings, SignalSettings, SignalStatus, WaveformType


class ValidationError(Exception):
    """Raised when a record has the wrong shape."""

    pass


# field name -> (min, max), None for unbounded
ACQUISITION_RANGES: dict[str, tuple[int | None, int | None]] = {
    "num_samples": (1, None),
    "sample_rate": (1, None),
    "channel_delay": (0, None),
    "capture_interval": (1, None),
    "web_update": (1, None),
}

SIGNAL_RANGES: dict[str, tuple[int | None, int | None]] = {
    "waveform_type": (min(WaveformType), max(WaveformType)),
    "amplitude": (0, 255),
    "frequency": (0, None),
    "duty_cycle": (0, 100),
    "dc_offset": (0, 255),
    "pulse_width_ms": (0, None),
}

Record = Union[AcquisitionSettings, SignalSettings, SignalStatus]


def validate_record_shape(record: Record) -> None:
    """Check every field holds a value of its declared primitive type.

    mashumaro passes JSON primitives through unchanged, so a device reporting
    `"numSamples": "100"` would otherwise produce a str-valued field.

    Raises
    ------
    ValidationError
        On the first field of the wrong type.
    """
    for f in dataclasses.fields(record):
        val = getattr(record, f.name)
        if f.type in ("bool", bool):
            ok = isinstance(val, bool)
        else:
            ok = isinstance(val, int) and not isinstance(val, bool)
        if not ok:
            raise ValidationError(
                f"{type(record).__name__}.{f.name} has invalid value {val!r}"
            )


def _check_ranges(record: Any, ranges: dict) -> tuple[bool, str]:
    problems = []
    for name, (lo, hi) in ranges.items():
        val = getattr(record, name)
        if lo is not None and val < lo:
            problems.append(f"{name}={val} < {lo}")
        elif hi is not None and val > hi:
            problems.append(f"{name}={val} > {hi}")
    if problems:
        return False, "; ".join(problems)
    return True, ""


def validate_acquisition_settings(settings: AcquisitionSettings) -> tuple[bool, str]:
    """Range check acquisition settings.

    Returns
    -------
    tuple[bool, str]
        (is_valid, error_message)
    """
    return _check_ranges(settings, ACQUISITION_RANGES)


def validate_signal_settings(settings: SignalSettings) -> tuple[bool, str]:
    """Range check signal-generator settings.

    Returns
    -------
    tuple[bool, str]
        (is_valid, error_message)
    """
    return _check_ranges(settings, SIGNAL_RANGES)
