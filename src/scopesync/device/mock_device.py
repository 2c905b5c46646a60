# -*- coding: utf-8 -*-
"""
In-memory stand-in for the acquisition device, served with aiohttp.web.

Implements every endpoint of the device API with synthetic waveforms, plus
fault injection for tests:

- `fail_endpoints`: endpoints that answer HTTP 500
- `malformed_endpoints`: endpoints that answer a body which is not JSON
- `data_delay`: seconds each `/data` request takes

Run standalone with `scopesync mock` or `run_mock_device()`.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from aiohttp import web
from loguru import logger

from scopesync.types import AcquisitionSettings, SignalSettings, WaveformType
from scopesync.util import ADC_MAX, DEFAULT_HOST_ADDR, NUM_CHANNELS

from .gateway import ENDPOINT


@dataclass
class MockDeviceState:
    acquisition: dict = field(default_factory=lambda: AcquisitionSettings().to_dict())
    signal: dict = field(default_factory=lambda: SignalSettings().to_dict())
    signal_enabled: bool = False
    mode: str = "continuous"
    pulses: int = 0
    num_channels: int = NUM_CHANNELS
    fail_endpoints: set[str] = field(default_factory=set)
    malformed_endpoints: set[str] = field(default_factory=set)
    data_delay: float = 0.0
    request_counts: Counter[str] = field(default_factory=Counter)
    data_inflight: int = 0
    max_data_inflight: int = 0
    seed: Optional[int] = None
    _rng: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self):
        self._rng = np.random.default_rng(self.seed)

    def requests_to(self, endpoint: str) -> int:
        return self.request_counts[endpoint]

    def make_frame(self) -> list[list[int]]:
        """Phase-shifted sines, one per channel, with a little noise."""
        n = int(self.acquisition.get("numSamples", 100))
        t = np.arange(n)
        mid = ADC_MAX / 2
        chans = []
        for i in range(self.num_channels):
            wave = mid + 0.4 * ADC_MAX * np.sin(2 * np.pi * t / 50 + i * np.pi / 3)
            wave += self._rng.normal(0, 10, n)
            chans.append(np.clip(wave, 0, ADC_MAX).astype(int).tolist())
        return chans


STATE_KEY = web.AppKey("mock_device_state", MockDeviceState)


routes = web.RouteTableDef()


@web.middleware
async def fault_injection(request: web.Request, handler):
    state = request.app[STATE_KEY]
    state.request_counts[request.path] += 1
    if request.path in state.fail_endpoints:
        logger.debug("Mock device failing {}", request.path)
        raise web.HTTPInternalServerError(text="injected failure")
    if request.path in state.malformed_endpoints:
        return web.Response(text="{not json", content_type="application/json")
    return await handler(request)


@routes.get(ENDPOINT.DATA)
async def handle_data(request: web.Request) -> web.Response:
    state = request.app[STATE_KEY]
    state.data_inflight += 1
    state.max_data_inflight = max(state.max_data_inflight, state.data_inflight)
    try:
        if state.data_delay:
            await asyncio.sleep(state.data_delay)
        return web.json_response({"channels": state.make_frame()})
    finally:
        state.data_inflight -= 1


@routes.get(ENDPOINT.SET_MODE)
async def handle_set_mode(request: web.Request) -> web.Response:
    mode = request.query.get("mode", "")
    if mode not in ("continuous", "snapshot"):
        raise web.HTTPBadRequest(text=f"bad mode {mode!r}")
    request.app[STATE_KEY].mode = mode
    return web.Response(text="OK")


@routes.post(ENDPOINT.SET_CONFIG)
async def handle_set_config(request: web.Request) -> web.Response:
    state = request.app[STATE_KEY]
    body = await _json_body(request)
    state.acquisition = AcquisitionSettings.from_dict(body).to_dict()
    return web.Response(text="OK")


@routes.get(ENDPOINT.GET_CONFIG)
async def handle_get_config(request: web.Request) -> web.Response:
    return web.json_response(request.app[STATE_KEY].acquisition)


@routes.post(ENDPOINT.SET_SIGNAL_CONFIG)
async def handle_set_signal_config(request: web.Request) -> web.Response:
    state = request.app[STATE_KEY]
    body = await _json_body(request)
    state.signal = SignalSettings.from_dict(body).to_dict()
    return web.Response(text="OK")


@routes.get(ENDPOINT.GET_SIGNAL_CONFIG)
async def handle_get_signal_config(request: web.Request) -> web.Response:
    return web.json_response(request.app[STATE_KEY].signal)


@routes.post(ENDPOINT.TOGGLE_SIGNAL)
async def handle_toggle_signal(request: web.Request) -> web.Response:
    state = request.app[STATE_KEY]
    state.signal_enabled = not state.signal_enabled
    return web.json_response({"enabled": state.signal_enabled})


@routes.post(ENDPOINT.SINGLE_PULSE)
async def handle_single_pulse(request: web.Request) -> web.Response:
    request.app[STATE_KEY].pulses += 1
    return web.Response(text="OK")


@routes.get(ENDPOINT.GET_SIGNAL_STATUS)
async def handle_signal_status(request: web.Request) -> web.Response:
    state = request.app[STATE_KEY]
    sig = state.signal
    return web.json_response(
        {
            "enabled": state.signal_enabled,
            "waveformType": sig.get("waveformType", WaveformType.DC.value),
            "amplitude": sig.get("amplitude", 0),
            "frequency": sig.get("frequency", 0),
            "dutyCycle": sig.get("dutyCycle", 0),
        }
    )


async def _json_body(request: web.Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        raise web.HTTPBadRequest(text="body is not JSON")
    if not isinstance(body, dict):
        raise web.HTTPBadRequest(text="body is not a JSON object")
    return body


def make_mock_device_app(state: Optional[MockDeviceState] = None) -> web.Application:
    app = web.Application(middlewares=[fault_injection])
    app[STATE_KEY] = state if state is not None else MockDeviceState()
    app.add_routes(routes)
    return app


def run_mock_device(host: str = DEFAULT_HOST_ADDR, port: int = 8080) -> None:
    """Serve the mock device until interrupted."""
    logger.info("Starting mock device on {}:{}", host, port)
    web.run_app(make_mock_device_app(), host=host, port=port, print=None)
