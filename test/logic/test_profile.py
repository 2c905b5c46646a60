"""Tests for connection profiles and presets."""

import pytest

from scopesync.types import (
    ACQUISITION_PRESETS,
    SIGNAL_PRESETS,
    SignalSettings,
    find_preset,
    validate_acquisition_settings,
    validate_signal_settings,
)
from scopesync.util import (
    DEFAULT_PORT,
    ClientProfile,
    list_profiles,
    load_profile,
    save_profile,
)


@pytest.fixture
def profiles_path(tmp_path):
    return tmp_path / "profiles.ini"


class TestProfiles:
    def test_missing_file_gives_defaults(self, profiles_path):
        prof = load_profile(path=profiles_path)
        assert prof == ClientProfile()
        assert prof.base_url == f"http://127.0.0.1:{DEFAULT_PORT}"
        assert list_profiles(profiles_path) == []

    def test_missing_named_profile(self, profiles_path):
        with pytest.raises(ValueError, match="not found"):
            load_profile("bench", profiles_path)

    def test_partial_section_uses_defaults(self, profiles_path):
        profiles_path.write_text("[bench]\nhost = 10.0.0.42\nplot = yes\n")
        prof = load_profile("bench", profiles_path)
        assert prof.host == "10.0.0.42"
        assert prof.plot is True
        assert prof.port == DEFAULT_PORT

    def test_save_and_load(self, profiles_path):
        prof = ClientProfile(
            name="lab", host="192.168.4.1", port=8080, timeout=2.5, log_level="DEBUG"
        )
        save_profile(prof, profiles_path)
        save_profile(ClientProfile(), profiles_path)
        assert sorted(list_profiles(profiles_path)) == ["default", "lab"]
        assert load_profile("lab", profiles_path) == prof

    @pytest.mark.parametrize(
        "body, message",
        [
            ("port = 70000", "Invalid port"),
            ("timeout = 0", "Invalid timeout"),
            ("log_level = LOUD", "Invalid log level"),
            ("colour = red", "Unknown keys"),
            ("plot = maybe", "Not a boolean"),
        ],
    )
    def test_invalid_profile(self, profiles_path, body, message):
        profiles_path.write_text(f"[default]\n{body}\n")
        with pytest.raises(ValueError, match=message):
            load_profile(path=profiles_path)


class TestPresets:
    def test_lookup(self):
        assert find_preset(ACQUISITION_PRESETS, 0).name == "High Speed"
        balanced = find_preset(ACQUISITION_PRESETS, " balanced ")
        assert balanced.settings.num_samples == 200
        assert find_preset(SIGNAL_PRESETS, "pwm 25%").duty_cycle == 25
        with pytest.raises(KeyError):
            find_preset(ACQUISITION_PRESETS, 4)
        with pytest.raises(KeyError):
            find_preset(SIGNAL_PRESETS, "Sawtooth")

    def test_presets_are_in_range(self):
        current = SignalSettings()
        for preset in ACQUISITION_PRESETS:
            assert validate_acquisition_settings(preset.settings)[0], preset.name
        for preset in SIGNAL_PRESETS:
            assert validate_signal_settings(preset.resolve(current))[0], preset.name

    def test_resolve_keeps_pulse_width(self):
        current = SignalSettings(pulse_width_ms=42, amplitude=1)
        resolved = find_preset(SIGNAL_PRESETS, "10kHz Sine").resolve(current)
        assert resolved.pulse_width_ms == 42
        assert resolved.amplitude == 200
        assert resolved.frequency == 10000
