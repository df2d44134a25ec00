"""Session statistics package for udpping.

This package holds the measurement results of a client session:
- Running RTT accumulator filled by the receiver
- Latency statistics (min/max/avg, percentiles)
- Loss accounting and the end-of-run report
"""

from session.report import SessionReport, format_reply
from session.result import (
    LatencyStats,
    SessionError,
    SessionResult,
    SessionStats,
    compute_latency_stats,
)

__all__ = [
    "LatencyStats",
    "SessionError",
    "SessionReport",
    "SessionResult",
    "SessionStats",
    "compute_latency_stats",
    "format_reply",
]
