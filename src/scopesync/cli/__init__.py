"""
Command-line interface for scopesync.

This module provides command-line tools for talking to a sampler device,
including:

- Live monitoring (log or matplotlib plot) with continuous/snapshot polling
- One-shot reads and writes of acquisition and signal-generator settings
- A mock device server for development
- Connection profile and preset listings

The CLI is built using the Click framework and provides a hierarchical
command structure with consistent help documentation.

Examples
--------
Serving a mock device and monitoring it with a live plot:
```bash
$ scopesync mock -p 8080
$ scopesync monitor -ha 127.0.0.1 -p 8080 --plot
```

Switching the generator to a 10 kHz sine:
```bash
$ scopesync signal set --preset "10kHz Sine"
```

See Also
--------
scopesync.session : The session driving `monitor`
scopesync.device : Gateway and mock device


CLI Tree
--------

```
$ scopesync --tree
cli
└── capture
└── config
    └── get
    └── set
└── mock
└── monitor
└── presets
└── profile
    └── list
    └── show
└── signal
    └── get
    └── pulse
    └── set
    └── status
    └── toggle
```
"""

from .base import cli, tree_option
