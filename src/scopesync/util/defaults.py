# -*- coding: utf-8 -*-

DEFAULT_HOST_ADDR = "127.0.0.1"
DEFAULT_PORT = 80
DEFAULT_TIMEOUT = 5  # seconds, per request (passed to the gateway by callers)
DEFAULT_LOGLEVEL = "INFO"
TEST_LOGLEVEL = "TRACE"

NUM_CHANNELS = 6  # fixed by the render surface, not by the device
ADC_MAX = 4095
SIGNAL_VREF = 3.3  # volts at full amplitude
SIGNAL_AMPLITUDE_MAX = 255

STARTUP_DELAY = 0.1  # seconds before the initial config fetch
FIRST_CAPTURE_DELAY = 1.0  # seconds after polling starts
PULSE_STATUS_DELAY = 0.1  # seconds after a single pulse before re-polling status
MIN_POLL_PERIOD_MS = 10  # floor for the poll timers, whatever webUpdate says
