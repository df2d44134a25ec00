"""Session reporting for udpping.

Contains:
- format_reply: Per-reply console line
- SessionReport: Report after the session completes
"""

from dataclasses import dataclass

from common.report import Report
from session.result import SessionResult

# Printed in place of RTT values when no reply was accounted
UNDEFINED = "n/a"


def format_reply(host: str, payload_size: int, sequence: int, rtt_ms: float, omitted: bool) -> str:
    """Format the line printed for each received reply."""
    line = f"Reply from {host}: bytes={payload_size} seq={sequence} time={rtt_ms:.1f}ms"
    if omitted:
        line += " (omitted)"
    return line


@dataclass
class SessionReport(Report):
    """Report after the client session completes."""

    result: SessionResult

    def print(self) -> None:
        """Print the session report."""
        r = self.result

        if not r.success:
            print(f"Session: FAILED ({r.error})")

        print(f"Statistics for {r.peer} ({r.payload_size}-byte packets)")
        print(
            f"\tPackets: Sent = {r.sent}, Received = {r.received}, "
            f"Lost = {r.lost} ({r.loss_pct:.1f}% loss)"
        )

        latency = r.latency_stats
        if latency:
            print(
                f"\tRTT (ms): Min = {latency.min_ms:.1f}, Max = {latency.max_ms:.1f}, "
                f"Avg = {latency.avg_ms:.1f}"
            )
            print(
                f"\t          p50 = {latency.p50_ms:.1f}, p95 = {latency.p95_ms:.1f}, "
                f"p99 = {latency.p99_ms:.1f} (n={latency.count})"
            )
        else:
            print(f"\tRTT (ms): Min = {UNDEFINED}, Max = {UNDEFINED}, Avg = {UNDEFINED}")

        if r.stats.omitted:
            print(f"\tOmitted (warm-up): {r.stats.omitted}")

    def success(self) -> bool:
        """Return True if the session completed and at least one reply arrived."""
        return self.result.success and self.result.received > 0
