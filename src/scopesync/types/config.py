"""Settings and status records exchanged with the device."""

import dataclasses
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig


class WaveformType(IntEnum):
    """Signal-generator waveform, as encoded on the wire."""

    DC = 0
    SQUARE = 1
    SINE = 2
    TRIANGLE = 3
    PWM = 4

    @property
    def label(self) -> str:
        return WAVEFORM_LABELS[self]


WAVEFORM_LABELS = {
    WaveformType.DC: "DC",
    WaveformType.SQUARE: "Square",
    WaveformType.SINE: "Sine",
    WaveformType.TRIANGLE: "Triangle",
    WaveformType.PWM: "PWM",
}


class AcqMode(str, Enum):
    """Acquisition mode. Values are the `/setMode` query strings."""

    CONTINUOUS = "continuous"
    SNAPSHOT = "snapshot"

    def flipped(self) -> "AcqMode":
        if self is AcqMode.CONTINUOUS:
            return AcqMode.SNAPSHOT
        return AcqMode.CONTINUOUS

    @property
    def label(self) -> str:
        return self.value.capitalize()


class _WireConfig(BaseConfig):
    serialize_by_alias = True


@dataclass(frozen=True, kw_only=True)
class AcquisitionSettings(DataClassDictMixin):
    """Device sampling cadence and client poll cadence.

    Attributes
    ----------
    num_samples : int
        Samples per channel per frame.
    sample_rate : int
        Device sample period (µs).
    channel_delay : int
        Settling delay between channels on the device.
    capture_interval : int
        Device-side capture period (ms).
    web_update : int
        Client poll cadence (ms). Drives both sample and status polling.
    """

    class Config(_WireConfig):
        pass

    num_samples: int = dataclasses.field(
        default=100, metadata=field_options(alias="numSamples")
    )
    sample_rate: int = dataclasses.field(
        default=100, metadata=field_options(alias="sampleRate")
    )
    channel_delay: int = dataclasses.field(
        default=5, metadata=field_options(alias="channelDelay")
    )
    capture_interval: int = dataclasses.field(
        default=50, metadata=field_options(alias="captureInterval")
    )
    web_update: int = dataclasses.field(
        default=500, metadata=field_options(alias="webUpdate")
    )


@dataclass(frozen=True, kw_only=True)
class SignalSettings(DataClassDictMixin):
    """Signal-generator waveform parameters.

    `waveform_type` is kept as a plain int so an unknown code reported by the
    device survives a round trip; see `waveform` for the enum view.
    """

    class Config(_WireConfig):
        pass

    waveform_type: int = dataclasses.field(
        default=WaveformType.DC.value, metadata=field_options(alias="waveformType")
    )
    amplitude: int = 128
    frequency: int = 1000
    duty_cycle: int = dataclasses.field(
        default=50, metadata=field_options(alias="dutyCycle")
    )
    dc_offset: int = dataclasses.field(
        default=128, metadata=field_options(alias="dcOffset")
    )
    pulse_width_ms: int = dataclasses.field(
        default=100, metadata=field_options(alias="pulseWidthMs")
    )

    @property
    def waveform(self) -> Optional[WaveformType]:
        return _as_waveform(self.waveform_type)


@dataclass(frozen=True, kw_only=True)
class SignalStatus(DataClassDictMixin):
    """Live signal-generator state as reported by the device."""

    class Config(_WireConfig):
        pass

    enabled: bool
    waveform_type: int = dataclasses.field(
        default=WaveformType.DC.value, metadata=field_options(alias="waveformType")
    )
    amplitude: int = 0
    frequency: int = 0
    duty_cycle: int = dataclasses.field(
        default=0, metadata=field_options(alias="dutyCycle")
    )

    @property
    def waveform(self) -> Optional[WaveformType]:
        return _as_waveform(self.waveform_type)


@dataclass(frozen=True)
class SignalDisplay:
    """Display fields derived from a SignalStatus."""

    enabled: bool
    state_text: str
    voltage: str
    label: str


def _as_waveform(code: int) -> Optional[WaveformType]:
    try:
        return WaveformType(code)
    except ValueError:
        return None


DEFAULT_ACQUISITION = AcquisitionSettings()
DEFAULT_SIGNAL = SignalSettings()
