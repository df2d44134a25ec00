"""Common modules for udpping.

This package contains shared code used by both client and server:
- protocol: defaults, size limits, TRACE level, DatagramSocket Protocol
- clock: Monotonic tick source
- message: Probe wire format encoding/decoding
- config: SessionConfig and peer resolution
- net: UDP socket setup
- priority: Best-effort thread priority
- report: Reporting abstractions
"""

from common.clock import ClockError, MonotonicClock
from common.config import ConfigError, Peer, SessionConfig, resolve_peer
from common.message import PROBE_MAGIC, Probe
from common.net import TransportError
from common.protocol import (
    DEFAULT_PORT,
    MAX_PAYLOAD_SIZE,
    MIN_PAYLOAD_SIZE,
    TRACE,
    DatagramSocket,
)

__all__ = [
    # Protocol
    "DatagramSocket",
    "DEFAULT_PORT",
    "MIN_PAYLOAD_SIZE",
    "MAX_PAYLOAD_SIZE",
    "TRACE",
    # Wire format
    "PROBE_MAGIC",
    "Probe",
    # Configuration
    "Peer",
    "SessionConfig",
    "resolve_peer",
    "MonotonicClock",
    # Exceptions
    "ClockError",
    "ConfigError",
    "TransportError",
]
