# -*- coding: utf-8 -*-
"""
Device access: the HTTP gateway and an in-process mock device.

See Also
--------
scopesync.device.gateway : Typed client for the device's HTTP API
scopesync.device.mock_device : aiohttp.web stand-in used by tests and `scopesync mock`
"""

from .gateway import ENDPOINT, DeviceGateway
from .mock_device import MockDeviceState, make_mock_device_app, run_mock_device

__all__ = [
    "ENDPOINT",
    "DeviceGateway",
    "MockDeviceState",
    "make_mock_device_app",
    "run_mock_device",
]
