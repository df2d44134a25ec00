"""Protocol definitions for udpping.

Contains:
- DatagramSocket Protocol for type checking
- Default configuration values
- Size limits for probe payloads
- Logging configuration
"""

import logging
import os
from typing import Protocol

# TRACE logging level (below DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Progress logging interval (configurable via envvar)
LOG_PROGRESS_INTERVAL = int(os.environ.get("UDPPING_LOG_INTERVAL", "100"))


class DatagramSocket(Protocol):
    """Protocol for the socket operations needed by the client loops."""

    def send(self, data: bytes, /) -> int: ...
    def recv(self, bufsize: int, /) -> bytes: ...


# Payload size limits in bytes
MIN_PAYLOAD_SIZE = 16  # magic + sequence + timestamp
MAX_PAYLOAD_SIZE = 1500

# Default configuration
DEFAULT_PORT = 6000
DEFAULT_PACKET_COUNT = 4
DEFAULT_PAYLOAD_SIZE = 64
DEFAULT_INTERVAL_MS = 1000
DEFAULT_POLL_TIMEOUT_MS = 100  # Receiver wakes this often to check for stop
DEFAULT_DRAIN_MS = 500  # Wait for in-flight replies after the last send
DEFAULT_WARMUP_S = 0.0

# Settle time after connect() so route lookup is not charged to the first probe
CONNECT_SETTLE_S = 0.05
