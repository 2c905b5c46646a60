# -*- coding: utf-8 -*-
"""# scopesync

Control and telemetry client for a six-channel 12-bit ADC sampler with a
built-in signal generator, reached over plain HTTP/JSON.

- `scopesync.session` : user-level flows (startup, settings, presets, signal)
- `scopesync.acq` : polling core (scheduler, status poller, store, buffers)
- `scopesync.device` : HTTP gateway and a mock device
- `scopesync.sinks` : render/status sinks (logging, matplotlib)
- `scopesync.cli` : the `scopesync` command
"""

from ._version import __version__
