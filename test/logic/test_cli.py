from unittest.mock import AsyncMock, patch

import click.testing
import pytest
import simplejson as json

from scopesync.cli import cli
from scopesync.types import (
    AcquisitionSettings,
    SignalSettings,
    SignalStatus,
    TransportError,
    WaveformType,
)


class FakeCliGateway:
    """Replaces DeviceGateway inside the CLI; records what was sent."""

    instances = []
    fail = False

    def __init__(self, base_url, timeout=None):
        self.base_url = base_url
        self.timeout = timeout
        self.applied = None
        self.pulses = 0
        FakeCliGateway.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        pass

    async def fetch_samples(self):
        return {"channels": [[1, 2, 3]] * 5 + ["bad"]}

    async def fetch_acquisition_config(self):
        if FakeCliGateway.fail:
            raise TransportError("/getConfig", 500)
        return AcquisitionSettings(web_update=250)

    async def apply_acquisition_config(self, settings):
        self.applied = settings

    async def fetch_signal_config(self):
        return SignalSettings(pulse_width_ms=300)

    async def apply_signal_config(self, settings):
        self.applied = settings

    async def fetch_signal_status(self):
        return SignalStatus(enabled=True, waveform_type=0, amplitude=128)

    async def toggle_signal(self):
        return True

    async def send_single_pulse(self):
        self.pulses += 1


@pytest.fixture
def cli_runner():
    return click.testing.CliRunner()


@pytest.fixture
def no_profiles(tmp_path):
    return ["--profiles-file", str(tmp_path / "profiles.ini")]


@pytest.fixture(autouse=True)
def fake_gateway_cls():
    FakeCliGateway.instances = []
    FakeCliGateway.fail = False
    with patch("scopesync.cli.base.DeviceGateway", FakeCliGateway):
        yield FakeCliGateway


class TestTree:
    def test_tree(self, cli_runner):
        result = cli_runner.invoke(cli, ["--tree"])
        assert result.exit_code == 0
        for name in ("monitor", "mock", "config", "signal", "pulse", "profile"):
            assert name in result.output

    def test_presets(self, cli_runner):
        result = cli_runner.invoke(cli, ["presets"])
        assert result.exit_code == 0
        assert "High Resolution" in result.output
        assert "DC 1.65V" in result.output


class TestDeviceCommands:
    def test_config_get(self, cli_runner, no_profiles):
        result = cli_runner.invoke(
            cli, ["config", "get", "-ha", "10.0.0.2", "-p", "8080", *no_profiles]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["webUpdate"] == 250
        assert FakeCliGateway.instances[0].base_url == "http://10.0.0.2:8080"

    def test_config_set_keeps_unspecified(self, cli_runner, no_profiles):
        result = cli_runner.invoke(
            cli, ["config", "set", "--num-samples", "300", *no_profiles]
        )
        assert result.exit_code == 0, result.output
        applied = FakeCliGateway.instances[0].applied
        assert applied.num_samples == 300
        assert applied.web_update == 250

    def test_config_set_preset(self, cli_runner, no_profiles):
        result = cli_runner.invoke(
            cli, ["config", "set", "--preset", "low power", *no_profiles]
        )
        assert result.exit_code == 0, result.output
        assert FakeCliGateway.instances[0].applied.web_update == 2000

        result = cli_runner.invoke(
            cli, ["config", "set", "--preset", "nope", *no_profiles]
        )
        assert result.exit_code != 0

    def test_config_get_device_error(self, cli_runner, no_profiles):
        FakeCliGateway.fail = True
        result = cli_runner.invoke(cli, ["config", "get", *no_profiles])
        assert result.exit_code == 1
        assert "Device error" in result.output

    def test_signal_set(self, cli_runner, no_profiles):
        result = cli_runner.invoke(
            cli,
            ["signal", "set", "--waveform", "sine", "--frequency", "500", *no_profiles],
        )
        assert result.exit_code == 0, result.output
        applied = FakeCliGateway.instances[0].applied
        assert applied.waveform is WaveformType.SINE
        assert applied.frequency == 500
        assert applied.pulse_width_ms == 300

    def test_signal_status_toggle_pulse(self, cli_runner, no_profiles):
        result = cli_runner.invoke(cli, ["signal", "status", *no_profiles])
        assert result.exit_code == 0, result.output
        assert "ON: DC 1.65V" in result.output

        result = cli_runner.invoke(cli, ["signal", "toggle", *no_profiles])
        assert "Signal ON" in result.output

        result = cli_runner.invoke(cli, ["signal", "pulse", *no_profiles])
        assert result.exit_code == 0
        assert FakeCliGateway.instances[-1].pulses == 1

    def test_capture_summary(self, cli_runner, no_profiles):
        result = cli_runner.invoke(cli, ["capture", *no_profiles])
        assert result.exit_code == 0, result.output
        summary = json.loads(result.output)
        assert summary["CH1"]["samples"] == 3
        assert summary["CH1"]["mean"] == 2.0
        assert summary["CH6"] == "malformed"


class TestMonitorCLI:
    @patch("scopesync.cli.base.run_monitor", new_callable=AsyncMock)
    def test_monitor_options(self, mock_run, cli_runner, no_profiles):
        result = cli_runner.invoke(
            cli,
            [
                "monitor",
                "-ha",
                "192.168.4.1",
                "--snapshot",
                "--duration",
                "2",
                "--no-log-to-file",
                "--no-log-to-stdout",
                *no_profiles,
            ],
        )
        assert result.exit_code == 0, result.output
        mock_run.assert_awaited_once()
        prof = mock_run.call_args.args[0]
        assert prof.base_url == "http://192.168.4.1:80"
        assert mock_run.call_args.kwargs == {
            "snapshot": True,
            "duration": 2.0,
            "plot": False,
        }

    def test_unknown_profile(self, cli_runner, no_profiles):
        result = cli_runner.invoke(cli, ["monitor", "-P", "bench", *no_profiles])
        assert result.exit_code != 0
        assert "not found" in result.output


class TestProfileCLI:
    def test_list_and_show(self, cli_runner, tmp_path):
        path = tmp_path / "profiles.ini"
        path.write_text("[bench]\nhost = 10.1.1.1\nport = 8080\n")
        result = cli_runner.invoke(
            cli, ["profile", "list", "--profiles-file", str(path)]
        )
        assert result.output.split() == ["bench"]

        result = cli_runner.invoke(
            cli, ["profile", "show", "bench", "--profiles-file", str(path)]
        )
        assert result.exit_code == 0, result.output
        shown = json.loads(result.output)
        assert shown["host"] == "10.1.1.1"
        assert shown["port"] == 8080
        assert shown["timeout"] == 5
