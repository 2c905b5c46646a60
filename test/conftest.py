import asyncio

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer

from scopesync.device import DeviceGateway, MockDeviceState, make_mock_device_app
from scopesync.types import (
    AcquisitionSettings,
    SignalSettings,
    SignalStatus,
    TransportError,
)


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "slow: marks test as slow running test")


class ManualTimer:
    """Stands in for TimerHandle; ticks only when the test says so."""

    def __init__(self, period, on_tick):
        self.period = period
        self.on_tick = on_tick
        self.cancelled = False
        self.ticks = 0

    def cancel(self):
        self.cancelled = True

    def tick(self):
        if self.cancelled:
            return
        self.ticks += 1
        self.on_tick()


class ManualTimerFactory:
    def __init__(self):
        self.timers: list[ManualTimer] = []

    def __call__(self, period, on_tick):
        timer = ManualTimer(period, on_tick)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]


class FakeGateway:
    """Gateway whose `/data` requests stay pending until the test resolves them."""

    def __init__(self):
        self.pending: list[asyncio.Future] = []
        self.data_calls = 0
        self.modes = []
        self.mode_error = None
        self.status = SignalStatus(enabled=False)
        self.status_error = None
        self.status_calls = 0

    async def fetch_samples(self):
        self.data_calls += 1
        fut = asyncio.get_running_loop().create_future()
        self.pending.append(fut)
        return await fut

    def resolve(self, payload):
        self.pending.pop(0).set_result(payload)

    def fail(self, exc=None):
        self.pending.pop(0).set_exception(exc or TransportError("/data", 500))

    async def set_mode(self, mode):
        if self.mode_error is not None:
            raise self.mode_error
        self.modes.append(mode)

    async def fetch_signal_status(self):
        self.status_calls += 1
        if self.status_error is not None:
            raise self.status_error
        return self.status

    async def fetch_acquisition_config(self):
        return AcquisitionSettings()

    async def fetch_signal_config(self):
        return SignalSettings()


@pytest.fixture
def settle():
    """Let spawned tasks run for a few loop iterations."""

    async def _settle(n: int = 5):
        for _ in range(n):
            await asyncio.sleep(0)

    return _settle


@pytest.fixture
def timers():
    return ManualTimerFactory()


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def device_state():
    return MockDeviceState(seed=0)


@pytest_asyncio.fixture
async def device_server(device_state):
    server = TestServer(make_mock_device_app(device_state))
    await server.start_server()
    yield server
    await server.close()


@pytest_asyncio.fixture
async def gateway(device_server):
    async with DeviceGateway(str(device_server.make_url("")), timeout=2) as gw:
        yield gw
