"""Session result types for udpping.

Contains:
- SessionError: Raised when a session cannot complete
- SessionStats: Running statistics accumulator owned by the receiver
- LatencyStats: Computed latency statistics in milliseconds
- compute_latency_stats: Compute stats from the accumulator
- SessionResult: Result of one client session
"""

from dataclasses import dataclass, field


class SessionError(Exception):
    """Raised when a session fails after setup."""

    pass


@dataclass
class SessionStats:
    """Running statistics accumulator.

    Written only by the receiver thread while it runs. The orchestrator reads
    it after joining the receiver, so no field here needs a lock.

    RTT values are in clock ticks. rtt_samples keeps one int per accounted
    reply for the percentiles, so memory grows linearly with the packet
    count (roughly 40 MB per million replies). Omitted replies are not kept.
    """

    received: int = 0  # All valid replies, including warm-up
    accounted: int = 0  # Replies after warm-up
    min_rtt: int | None = None
    max_rtt: int | None = None
    total_rtt: int = 0
    rtt_samples: list[int] = field(default_factory=list)

    @property
    def omitted(self) -> int:
        return self.received - self.accounted

    def record(self, rtt: int, accounted: bool) -> None:
        """Fold one valid reply into the statistics."""
        self.received += 1
        if not accounted:
            return

        if self.accounted == 0:
            self.min_rtt = rtt
            self.max_rtt = rtt
        else:
            assert self.min_rtt is not None and self.max_rtt is not None
            self.min_rtt = min(rtt, self.min_rtt)
            self.max_rtt = max(rtt, self.max_rtt)
        self.total_rtt += rtt
        self.accounted += 1
        self.rtt_samples.append(rtt)


@dataclass
class LatencyStats:
    """Computed latency statistics in milliseconds."""

    count: int
    min_ms: float
    max_ms: float
    avg_ms: float
    p50_ms: float
    p95_ms: float
    p99_ms: float


def compute_latency_stats(stats: SessionStats, ticks_per_ms: float) -> LatencyStats | None:
    """Compute latency statistics from accounted replies.

    Args:
        stats: Accumulator filled by the receiver.
        ticks_per_ms: Clock conversion factor.

    Returns:
        LatencyStats in milliseconds, or None if no reply was accounted.
    """
    if stats.accounted == 0 or stats.min_rtt is None or stats.max_rtt is None:
        return None

    samples_ms = sorted(s / ticks_per_ms for s in stats.rtt_samples)

    def percentile(sorted_data: list[float], p: float) -> float:
        idx = int(p / 100 * (len(sorted_data) - 1))
        return sorted_data[idx]

    return LatencyStats(
        count=stats.accounted,
        min_ms=stats.min_rtt / ticks_per_ms,
        max_ms=stats.max_rtt / ticks_per_ms,
        avg_ms=stats.total_rtt / stats.accounted / ticks_per_ms,
        p50_ms=percentile(samples_ms, 50),
        p95_ms=percentile(samples_ms, 95),
        p99_ms=percentile(samples_ms, 99),
    )


@dataclass
class SessionResult:
    """Result of one client session.

    Attributes:
        peer: Host the probes were sent to.
        payload_size: Probe size in bytes.
        sent: Number of probes handed to the socket.
        stats: Receiver statistics, read after the receiver was joined.
        ticks_per_ms: Clock conversion factor for the RTT values in stats.
        elapsed_s: Wall time from first send to receiver stop.
        error: Terminal error if the session was aborted.
    """

    peer: str
    payload_size: int
    sent: int = 0
    stats: SessionStats = field(default_factory=SessionStats)
    ticks_per_ms: float = 1_000_000.0
    elapsed_s: float = 0.0
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def received(self) -> int:
        return self.stats.received

    @property
    def lost(self) -> int:
        return max(0, self.sent - self.stats.received)

    @property
    def loss_pct(self) -> float:
        """Return packet loss as percentage (0-100)."""
        if self.sent == 0:
            return 0.0
        return self.lost * 100 / self.sent

    @property
    def latency_stats(self) -> LatencyStats | None:
        return compute_latency_stats(self.stats, self.ticks_per_ms)
