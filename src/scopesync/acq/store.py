"""Last-known-good acquisition and signal-generator settings."""

from __future__ import annotations

from typing import Optional

from loguru import logger

from scopesync.types import (
    AcquisitionSettings,
    SignalSettings,
    validate_acquisition_settings,
    validate_signal_settings,
)
from scopesync.util import MIN_POLL_PERIOD_MS


class ConfigStore:
    """Holds exactly one current value per configuration domain.

    Values are frozen dataclasses and are only ever replaced whole, after the
    device has confirmed them (an apply round trip or a config fetch). Commits
    are synchronous: the next read, e.g. by the scheduler re-arming its timer,
    sees the new value.
    """

    def __init__(
        self,
        acquisition: Optional[AcquisitionSettings] = None,
        signal: Optional[SignalSettings] = None,
    ):
        if acquisition is None:
            acquisition = AcquisitionSettings()
        if signal is None:
            signal = SignalSettings()
        self._acquisition = acquisition
        self._signal = signal

    def get(self) -> tuple[AcquisitionSettings, SignalSettings]:
        return self._acquisition, self._signal

    @property
    def acquisition(self) -> AcquisitionSettings:
        return self._acquisition

    @property
    def signal(self) -> SignalSettings:
        return self._signal

    @property
    def poll_period_ms(self) -> int:
        """Timer cadence from `web_update`, floored at MIN_POLL_PERIOD_MS.

        The device may hold any webUpdate, including 0, so the committed value
        is kept as-is and only the cadence is clamped.
        """
        web_update = self._acquisition.web_update
        if web_update < MIN_POLL_PERIOD_MS:
            logger.warning(
                "webUpdate {} ms is below {} ms, polling at {} ms",
                web_update,
                MIN_POLL_PERIOD_MS,
                MIN_POLL_PERIOD_MS,
            )
            return MIN_POLL_PERIOD_MS
        return web_update

    def commit_acquisition(self, settings: AcquisitionSettings) -> None:
        if not isinstance(settings, AcquisitionSettings):
            raise TypeError(f"Expected AcquisitionSettings, got {type(settings)}")
        ok, msg = validate_acquisition_settings(settings)
        if not ok:
            # device is authoritative, keep what it accepted
            logger.warning("Committing out-of-range acquisition settings: {}", msg)
        self._acquisition = settings
        logger.debug("Committed {}", settings)

    def commit_signal(self, settings: SignalSettings) -> None:
        if not isinstance(settings, SignalSettings):
            raise TypeError(f"Expected SignalSettings, got {type(settings)}")
        ok, msg = validate_signal_settings(settings)
        if not ok:
            logger.warning("Committing out-of-range signal settings: {}", msg)
        self._signal = settings
        logger.debug("Committed {}", settings)

    def __repr__(self):
        return f"ConfigStore({self._acquisition}, {self._signal})"
