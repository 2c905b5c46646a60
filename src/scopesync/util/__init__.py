# -*- coding: utf-8 -*-
"""
Utility functions and constants for scopesync.

- Logging configuration and management (loguru)
- Default connection, timing and device constants
- The cancelable periodic timer used by the pollers
- Detached task bookkeeping
- Connection profiles (INI)

Examples
--------
```python
from scopesync.util import start_client_log, TEST_LOGLEVEL
start_client_log(log_to_stdout=True, log_to_file=False, log_level=TEST_LOGLEVEL)
```

See Also
--------
scopesync.util.logging : Logging configuration
scopesync.util.timer : Cancelable timer
"""
# everything here will be exported at top level of scopesync.util

from .defaults import (
    ADC_MAX,
    DEFAULT_HOST_ADDR,
    DEFAULT_LOGLEVEL,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    FIRST_CAPTURE_DELAY,
    MIN_POLL_PERIOD_MS,
    NUM_CHANNELS,
    PULSE_STATUS_DELAY,
    SIGNAL_AMPLITUDE_MAX,
    SIGNAL_VREF,
    STARTUP_DELAY,
    TEST_LOGLEVEL,
)
from .logging import (
    clear_log,
    log_default_path_client,
    shutdown_client_log,
    start_client_log,
)
from .profile import (
    ClientProfile,
    list_profiles,
    load_profile,
    profiles_default_path,
    save_profile,
    validate_profile,
)
from .tasks import TaskGroup, log_task_result
from .timer import TimerHandle, start_timer

__all__ = [
    "ADC_MAX",
    "DEFAULT_HOST_ADDR",
    "DEFAULT_LOGLEVEL",
    "DEFAULT_PORT",
    "DEFAULT_TIMEOUT",
    "FIRST_CAPTURE_DELAY",
    "MIN_POLL_PERIOD_MS",
    "NUM_CHANNELS",
    "PULSE_STATUS_DELAY",
    "SIGNAL_AMPLITUDE_MAX",
    "SIGNAL_VREF",
    "STARTUP_DELAY",
    "TEST_LOGLEVEL",
    "clear_log",
    "log_default_path_client",
    "shutdown_client_log",
    "start_client_log",
    "ClientProfile",
    "list_profiles",
    "load_profile",
    "profiles_default_path",
    "save_profile",
    "validate_profile",
    "TaskGroup",
    "log_task_result",
    "TimerHandle",
    "start_timer",
]
