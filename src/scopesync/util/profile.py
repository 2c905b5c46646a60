"""Connection profiles for scopesync.

Profiles live in an INI file, one section per profile:

[default]
host = 192.168.4.1
port = 80
timeout = 5
log_level = INFO
log_to_file = true
log_to_stdout = true
log_path =
plot = false

[bench]
host = 10.0.0.42

Keys missing from a section take the built-in defaults. If the file does not
exist, or has no `default` section, `load_profile("default")` returns the
built-in defaults.

See Also
--------
scopesync.cli : `scopesync profile list`, `scopesync profile show`
"""

from __future__ import annotations

import dataclasses
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from loguru import logger

from .defaults import (
    DEFAULT_HOST_ADDR,
    DEFAULT_LOGLEVEL,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
)

DEFAULT_PROFILE = "default"
VALID_LOG_LEVELS = (
    "TRACE",
    "DEBUG",
    "INFO",
    "SUCCESS",
    "WARNING",
    "ERROR",
    "CRITICAL",
)


@dataclass
class ClientProfile:
    """Where the device is and how the client should log."""

    name: str = DEFAULT_PROFILE
    host: str = DEFAULT_HOST_ADDR
    port: int = DEFAULT_PORT
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = DEFAULT_LOGLEVEL
    log_to_file: bool = True
    log_to_stdout: bool = True
    log_path: str = ""
    plot: bool = False

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


def profiles_default_path() -> Path:
    return Path.home().joinpath(".scopesync/profiles.ini")


def _read(path: Optional[Path]) -> tuple[ConfigParser, Path]:
    path = Path(path) if path is not None else profiles_default_path()
    config = ConfigParser()
    if path.exists():
        config.read(path)
    return config, path


def validate_profile(config: ConfigParser, section: str) -> tuple[bool, str]:
    """Validate a profile section.

    Returns
    -------
    tuple[bool, str]
        (is_valid, error_message)
    """
    sec = config[section]
    known = {f.name for f in dataclasses.fields(ClientProfile)} - {"name"}
    unknown = set(sec.keys()) - known
    if unknown:
        return False, f"Unknown keys: {', '.join(sorted(unknown))}"
    try:
        if "port" in sec and not 0 < sec.getint("port") < 65536:
            return False, f"Invalid port: {sec['port']}"
        if "timeout" in sec and sec.getfloat("timeout") <= 0:
            return False, f"Invalid timeout: {sec['timeout']}"
        for key in ("log_to_file", "log_to_stdout", "plot"):
            if key in sec:
                sec.getboolean(key)
    except ValueError as e:
        return False, str(e)
    if "log_level" in sec and sec["log_level"].upper() not in VALID_LOG_LEVELS:
        return False, f"Invalid log level: {sec['log_level']}"
    return True, ""


def load_profile(
    name: str = DEFAULT_PROFILE, path: Optional[Path] = None
) -> ClientProfile:
    """Load a profile by name.

    Raises
    ------
    ValueError
        If the profile does not exist (other than `default`) or is invalid.
    """
    config, path = _read(path)
    if not config.has_section(name):
        if name == DEFAULT_PROFILE:
            logger.debug("No '{}' profile in {}, using built-in defaults", name, path)
            return ClientProfile()
        raise ValueError(f"Profile '{name}' not found in {path}")

    is_valid, msg = validate_profile(config, name)
    if not is_valid:
        raise ValueError(f"Invalid profile '{name}' in {path}: {msg}")

    sec = config[name]
    base = ClientProfile(name=name)
    profile = ClientProfile(
        name=name,
        host=sec.get("host", base.host),
        port=sec.getint("port", base.port),
        timeout=sec.getfloat("timeout", base.timeout),
        log_level=sec.get("log_level", base.log_level).upper(),
        log_to_file=sec.getboolean("log_to_file", base.log_to_file),
        log_to_stdout=sec.getboolean("log_to_stdout", base.log_to_stdout),
        log_path=sec.get("log_path", base.log_path),
        plot=sec.getboolean("plot", base.plot),
    )
    logger.debug("Loaded profile {} from {}", profile, path)
    return profile


def save_profile(profile: ClientProfile, path: Optional[Path] = None) -> Path:
    """Write (or overwrite) one profile section, keeping the others."""
    config, path = _read(path)
    values = dataclasses.asdict(profile)
    name = values.pop("name")
    config[name] = {
        k: str(v).lower() if isinstance(v, bool) else str(v)
        for k, v in values.items()
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        config.write(f)
    logger.info("Saved profile '{}' to {}", name, path)
    return path


def list_profiles(path: Optional[Path] = None) -> list[str]:
    config, _ = _read(path)
    return config.sections()
