"""Tests for DeviceGateway against the mock device."""

import dataclasses

import pytest
from loguru import logger

import scopesync
from scopesync.device import ENDPOINT, DeviceGateway
from scopesync.types import (
    AcqMode,
    AcquisitionSettings,
    ProtocolError,
    SignalSettings,
    TransportError,
    WaveformType,
)
from scopesync.util import TEST_LOGLEVEL


class TestDeviceGateway:
    @pytest.fixture(autouse=True, scope="class")
    def client_log(self):
        scopesync.util.start_client_log(
            log_level=TEST_LOGLEVEL,
            log_to_stdout=True,
            log_to_file=False,
            clear_prev=False,
        )
        yield
        scopesync.util.shutdown_client_log()

    @pytest.fixture(autouse=True, scope="function")
    def log(self, request):
        logger.warning("STARTED Test '{}'".format(request.node.originalname))

        def fin():
            logger.warning("COMPLETED Test '{}' \n".format(request.node.originalname))

        request.addfinalizer(fin)

    @pytest.mark.asyncio
    async def test_fetch_samples(self, gateway, device_state):
        device_state.acquisition["numSamples"] = 32
        payload = await gateway.fetch_samples()
        assert len(payload["channels"]) == 6
        assert all(len(ch) == 32 for ch in payload["channels"])
        assert all(0 <= v <= 4095 for ch in payload["channels"] for v in ch)

    @pytest.mark.asyncio
    async def test_acquisition_config(self, gateway, device_state):
        assert await gateway.fetch_acquisition_config() == AcquisitionSettings()

        new = AcquisitionSettings(
            num_samples=500,
            sample_rate=1000,
            channel_delay=10,
            capture_interval=200,
            web_update=1000,
        )
        await gateway.apply_acquisition_config(new)
        assert device_state.acquisition["webUpdate"] == 1000
        assert await gateway.fetch_acquisition_config() == new

    @pytest.mark.asyncio
    async def test_signal_config(self, gateway, device_state):
        new = SignalSettings(
            waveform_type=WaveformType.SINE.value, amplitude=200, frequency=10000
        )
        await gateway.apply_signal_config(new)
        assert device_state.signal["waveformType"] == 2
        assert await gateway.fetch_signal_config() == new

    @pytest.mark.asyncio
    async def test_set_mode(self, gateway, device_state):
        await gateway.set_mode(AcqMode.SNAPSHOT)
        assert device_state.mode == "snapshot"
        await gateway.set_mode("continuous")
        assert device_state.mode == "continuous"

    @pytest.mark.asyncio
    async def test_toggle_signal_and_status(self, gateway, device_state):
        status = await gateway.fetch_signal_status()
        assert status.enabled is False

        assert await gateway.toggle_signal() is True
        status = await gateway.fetch_signal_status()
        assert status.enabled is True
        assert status.waveform_type == device_state.signal["waveformType"]

        assert await gateway.toggle_signal() is False

    @pytest.mark.asyncio
    async def test_single_pulse(self, gateway, device_state):
        await gateway.send_single_pulse()
        await gateway.send_single_pulse()
        assert device_state.pulses == 2

    @pytest.mark.asyncio
    async def test_http_error_is_transport_error(self, gateway, device_state):
        device_state.fail_endpoints.add(ENDPOINT.GET_CONFIG)
        with pytest.raises(TransportError) as exc_info:
            await gateway.fetch_acquisition_config()
        assert exc_info.value.status == 500
        assert exc_info.value.endpoint == ENDPOINT.GET_CONFIG

    @pytest.mark.asyncio
    async def test_invalid_json_is_protocol_error(self, gateway, device_state):
        device_state.malformed_endpoints.add(ENDPOINT.DATA)
        with pytest.raises(ProtocolError):
            await gateway.fetch_samples()

    @pytest.mark.asyncio
    async def test_wrong_shape_is_protocol_error(self, gateway, device_state):
        device_state.acquisition = {"numSamples": "lots"}
        with pytest.raises(ProtocolError):
            await gateway.fetch_acquisition_config()

        device_state.acquisition = [1, 2, 3]
        with pytest.raises(ProtocolError):
            await gateway.fetch_acquisition_config()

    @pytest.mark.asyncio
    async def test_malformed_toggle_reply(self, gateway, device_state):
        device_state.malformed_endpoints.add(ENDPOINT.TOGGLE_SIGNAL)
        with pytest.raises(ProtocolError):
            await gateway.toggle_signal()

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        async with DeviceGateway("http://127.0.0.1:1", timeout=1) as gw:
            with pytest.raises(TransportError) as exc_info:
                await gw.fetch_signal_status()
        assert exc_info.value.status is None

    @pytest.mark.asyncio
    async def test_wrong_record_type(self, gateway):
        with pytest.raises(TypeError):
            await gateway.apply_acquisition_config(SignalSettings())
        with pytest.raises(TypeError):
            await gateway.apply_signal_config(dataclasses.asdict(SignalSettings()))

    @pytest.mark.asyncio
    async def test_not_open(self):
        gw = DeviceGateway.from_host("127.0.0.1", 8080)
        assert not gw.is_open
        with pytest.raises(RuntimeError):
            await gw.fetch_samples()

    @pytest.mark.asyncio
    async def test_data_requests_logged(self, gateway, device_state):
        await gateway.fetch_samples()
        await gateway.fetch_signal_status()
        assert device_state.requests_to(ENDPOINT.DATA) == 1
        assert device_state.requests_to(ENDPOINT.GET_SIGNAL_STATUS) == 1
