# -*- coding: utf-8 -*-
"""
Typed request/response wrapper around the device's HTTP/JSON API.

Each endpoint has exactly one coroutine here. The gateway is a pure I/O
boundary:

- no retries (the next poller tick is the retry)
- no timeout of its own (callers pass one in)
- never touches the ConfigStore

Failures are raised as `TransportError` (network failure or non-2xx status)
or `ProtocolError` (payload is not well-formed JSON, or does not have the
shape of the expected record). Callers catch them at the call site.

Examples
--------
```python
async with DeviceGateway.from_host("192.168.4.1", timeout=5) as gw:
    settings = await gw.fetch_acquisition_config()
    await gw.apply_acquisition_config(dataclasses.replace(settings, web_update=250))
```
"""

from __future__ import annotations

import asyncio
import types
from typing import Any, Optional, Type, TypeVar

import aiohttp
import simplejson as json
from loguru import logger
from mashumaro.exceptions import InvalidFieldValue, MissingField

from scopesync.types import (
    AcqMode,
    AcquisitionSettings,
    ProtocolError,
    SignalSettings,
    SignalStatus,
    TransportError,
    ValidationError,
    validate_record_shape,
)
from scopesync.util import DEFAULT_PORT

ENDPOINT = types.SimpleNamespace()
ENDPOINT.DATA = "/data"
ENDPOINT.SET_MODE = "/setMode"
ENDPOINT.SET_CONFIG = "/setConfig"
ENDPOINT.GET_CONFIG = "/getConfig"
ENDPOINT.SET_SIGNAL_CONFIG = "/setSignalConfig"
ENDPOINT.GET_SIGNAL_CONFIG = "/getSignalConfig"
ENDPOINT.TOGGLE_SIGNAL = "/toggleSignal"
ENDPOINT.SINGLE_PULSE = "/singlePulse"
ENDPOINT.GET_SIGNAL_STATUS = "/getSignalStatus"

R = TypeVar("R", AcquisitionSettings, SignalSettings, SignalStatus)


def _parse_record(endpoint: str, record_type: Type[R], payload: Any) -> R:
    if not isinstance(payload, dict):
        raise ProtocolError(
            endpoint, f"expected a JSON object, got {type(payload).__name__}"
        )
    try:
        record = record_type.from_dict(payload)
        validate_record_shape(record)
    except (
        MissingField,
        InvalidFieldValue,
        ValidationError,
        TypeError,
        ValueError,
    ) as e:
        raise ProtocolError(endpoint, str(e)) from e
    return record


def _summarise(payload: Any) -> str:
    # /data payloads are large, log their shape only
    if isinstance(payload, dict) and isinstance(payload.get("channels"), list):
        lens = [len(c) if isinstance(c, list) else "?" for c in payload["channels"]]
        return f"<channels {lens}>"
    return repr(payload)


class DeviceGateway:
    """Async client for one device.

    Parameters
    ----------
    base_url : str
        e.g. "http://192.168.4.1"
    session : aiohttp.ClientSession, optional
        An externally owned session. If not given, `open()` creates one and
        `close()` closes it.
    timeout : float, optional
        Total per-request timeout in seconds. None (default) means the
        gateway enforces none.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    @classmethod
    def from_host(cls, host: str, port: int = DEFAULT_PORT, **kwargs) -> DeviceGateway:
        return cls(f"http://{host}:{port}", **kwargs)

    @property
    def is_open(self) -> bool:
        return self._session is not None and not self._session.closed

    async def open(self) -> None:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            logger.info("Opened device gateway to {}", self.base_url)

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            logger.info("Closed device gateway to {}", self.base_url)

    async def __aenter__(self) -> DeviceGateway:
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ----------------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[dict] = None,
        body: Optional[dict] = None,
        expect_json: bool = False,
    ) -> Any:
        if self._session is None:
            raise RuntimeError("DeviceGateway is not open.")
        logger.debug(
            "*REQUEST* (client->): {} {} {}", method, endpoint, params or body or ""
        )
        try:
            async with self._session.request(
                method,
                self.base_url + endpoint,
                params=params,
                json=body,
                timeout=self._timeout,
            ) as resp:
                if not 200 <= resp.status < 300:
                    raise TransportError(endpoint, resp.status)
                raw = await resp.read() if expect_json else b""
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            raise TransportError(endpoint, detail=str(e) or type(e).__name__) from e

        if not expect_json:
            logger.debug("*RESPONSE* (client<-): {} ok", endpoint)
            return None
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProtocolError(endpoint, f"invalid JSON: {e}") from e
        logger.debug("*RESPONSE* (client<-): {} {}", endpoint, _summarise(payload))
        return payload

    # ----------------------------------------------------------------------------------
    # Acquisition
    # ----------------------------------------------------------------------------------

    async def fetch_samples(self) -> Any:
        """Fetch one frame. Returns the parsed JSON as-is; shape checks are
        left to the sample buffer adapter, which tolerates partial frames."""
        return await self._request("GET", ENDPOINT.DATA, expect_json=True)

    async def set_mode(self, mode: AcqMode | str) -> None:
        mode = AcqMode(mode)
        await self._request("GET", ENDPOINT.SET_MODE, params={"mode": mode.value})

    async def apply_acquisition_config(self, settings: AcquisitionSettings) -> None:
        if not isinstance(settings, AcquisitionSettings):
            raise TypeError(f"Expected AcquisitionSettings, got {type(settings)}")
        await self._request("POST", ENDPOINT.SET_CONFIG, body=settings.to_dict())

    async def fetch_acquisition_config(self) -> AcquisitionSettings:
        payload = await self._request("GET", ENDPOINT.GET_CONFIG, expect_json=True)
        return _parse_record(ENDPOINT.GET_CONFIG, AcquisitionSettings, payload)

    # ----------------------------------------------------------------------------------
    # Signal generator
    # ----------------------------------------------------------------------------------

    async def apply_signal_config(self, settings: SignalSettings) -> None:
        if not isinstance(settings, SignalSettings):
            raise TypeError(f"Expected SignalSettings, got {type(settings)}")
        await self._request("POST", ENDPOINT.SET_SIGNAL_CONFIG, body=settings.to_dict())

    async def fetch_signal_config(self) -> SignalSettings:
        payload = await self._request(
            "GET", ENDPOINT.GET_SIGNAL_CONFIG, expect_json=True
        )
        return _parse_record(ENDPOINT.GET_SIGNAL_CONFIG, SignalSettings, payload)

    async def toggle_signal(self) -> bool:
        """Flip the generator on/off. Returns the device's new `enabled` state."""
        payload = await self._request("POST", ENDPOINT.TOGGLE_SIGNAL, expect_json=True)
        enabled = payload.get("enabled") if isinstance(payload, dict) else None
        if not isinstance(enabled, bool):
            raise ProtocolError(ENDPOINT.TOGGLE_SIGNAL, "expected {enabled: bool}")
        return enabled

    async def send_single_pulse(self) -> None:
        await self._request("POST", ENDPOINT.SINGLE_PULSE)

    async def fetch_signal_status(self) -> SignalStatus:
        payload = await self._request(
            "GET", ENDPOINT.GET_SIGNAL_STATUS, expect_json=True
        )
        return _parse_record(ENDPOINT.GET_SIGNAL_STATUS, SignalStatus, payload)

    def __repr__(self):
        return f"DeviceGateway({self.base_url!r})"
