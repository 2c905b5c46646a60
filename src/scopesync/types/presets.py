"""Named acquisition and signal-generator presets."""

from dataclasses import dataclass
from typing import Optional, Sequence, TypeVar, Union

from .config import AcquisitionSettings, SignalSettings, WaveformType


@dataclass(frozen=True)
class AcquisitionPreset:
    name: str
    settings: AcquisitionSettings


@dataclass(frozen=True)
class SignalPreset:
    """Signal preset. Pulse width is not part of a preset, see `resolve`."""

    name: str
    waveform_type: int
    amplitude: int
    frequency: int
    duty_cycle: int
    dc_offset: int

    def resolve(self, current: SignalSettings) -> SignalSettings:
        """Full settings for this preset, keeping `current`'s pulse width."""
        return SignalSettings(
            waveform_type=self.waveform_type,
            amplitude=self.amplitude,
            frequency=self.frequency,
            duty_cycle=self.duty_cycle,
            dc_offset=self.dc_offset,
            pulse_width_ms=current.pulse_width_ms,
        )


ACQUISITION_PRESETS: tuple[AcquisitionPreset, ...] = (
    AcquisitionPreset(
        "High Speed",
        AcquisitionSettings(
            num_samples=100,
            sample_rate=10,
            channel_delay=1,
            capture_interval=20,
            web_update=200,
        ),
    ),
    AcquisitionPreset(
        "Balanced",
        AcquisitionSettings(
            num_samples=200,
            sample_rate=100,
            channel_delay=5,
            capture_interval=50,
            web_update=500,
        ),
    ),
    AcquisitionPreset(
        "High Resolution",
        AcquisitionSettings(
            num_samples=500,
            sample_rate=1000,
            channel_delay=10,
            capture_interval=200,
            web_update=1000,
        ),
    ),
    AcquisitionPreset(
        "Low Power",
        AcquisitionSettings(
            num_samples=50,
            sample_rate=5000,
            channel_delay=20,
            capture_interval=1000,
            web_update=2000,
        ),
    ),
)

DEFAULT_ACQUISITION_PRESET = "Balanced"

SIGNAL_PRESETS: tuple[SignalPreset, ...] = (
    SignalPreset("1kHz Square", WaveformType.SQUARE.value, 255, 1000, 50, 128),
    SignalPreset("10kHz Sine", WaveformType.SINE.value, 200, 10000, 50, 128),
    SignalPreset("PWM 25%", WaveformType.PWM.value, 255, 1000, 25, 0),
    SignalPreset("Test Signal", WaveformType.SQUARE.value, 128, 100, 50, 64),
    SignalPreset("DC 1.65V", WaveformType.DC.value, 128, 0, 0, 128),
)

P = TypeVar("P", AcquisitionPreset, SignalPreset)


def find_preset(presets: Sequence[P], key: Union[int, str]) -> P:
    """Look up a preset by index or (case-insensitive) name.

    Raises
    ------
    KeyError
        If no preset matches.
    """
    if isinstance(key, int):
        if 0 <= key < len(presets):
            return presets[key]
        raise KeyError(f"Preset index out of range: {key}")
    match: Optional[P] = next(
        (p for p in presets if p.name.lower() == key.strip().lower()), None
    )
    if match is None:
        names = ", ".join(p.name for p in presets)
        raise KeyError(f"Unknown preset '{key}'. Available: {names}")
    return match
