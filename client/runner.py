"""Client runner for udpping.

Contains run_session(), which owns the socket and both loops for one
measurement, and run_client(), which validates configuration, runs the
session, prints the report and returns an exit code.
"""

import logging
import time
from enum import IntEnum

from client.receiver import Receiver
from client.sender import SendError, Sender
from common.clock import Clock, ClockError, MonotonicClock
from common.config import ConfigError, Peer, SessionConfig
from common.net import TransportError, open_client_socket
from common.priority import raise_thread_priority
from session.report import SessionReport
from session.result import SessionError, SessionResult

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """Exit codes for client operations."""

    SUCCESS = 0  # All probes sent, at least one reply
    SESSION_FAILED = 1  # Transport, clock or send failure
    CONFIG_ERROR = 2  # Rejected before any socket was opened
    NO_REPLIES = 3  # Session ran but nothing came back


def run_session(config: SessionConfig, peer: Peer, clock: Clock) -> SessionResult:
    """Run one measurement session against peer.

    Starts the receiver, sends all probes, waits the drain interval, then
    stops and joins the receiver before its statistics are read.

    Raises:
        TransportError: If the socket cannot be set up.
        ClockError: If the session start cannot be timestamped.
    """
    result = SessionResult(
        peer=config.host,
        payload_size=config.payload_size,
        ticks_per_ms=clock.ticks_per_ms,
    )

    sock = open_client_socket(peer, config.poll_timeout_s)
    try:
        session_start = clock.now()
        warmup_end = session_start + int(config.warmup_s * 1000 * clock.ticks_per_ms)

        receiver = Receiver(sock, config, clock, warmup_end, host=config.host)
        sender = Sender(sock, config, clock)

        logger.info(
            f"Client: pinging {config.host} ({peer.host}) port {peer.sockaddr[1]} "
            f"with {config.packet_count} x {config.payload_size} bytes"
        )
        receiver.start()
        start = time.monotonic()
        try:
            if config.raise_priority:
                raise_thread_priority("sender")
            try:
                sender.run()
            except (SendError, ClockError) as e:
                logger.error(f"Client: aborting sends after {sender.sent} probes: {e}")
                result.error = e
            time.sleep(config.drain_s)
        finally:
            # Join before reading stats: the receiver is their only writer
            receiver.stop()
            receiver.join()
            result.sent = sender.sent
            result.elapsed_s = time.monotonic() - start

        result.stats = receiver.stats
        if receiver.error is not None and result.error is None:
            result.error = SessionError(f"Receiver failed: {receiver.error}")

        logger.info(
            f"Client: session complete ({result.sent} sent, {result.received} received, "
            f"{result.stats.omitted} omitted)"
        )
        return result
    finally:
        sock.close()


def run_client(config: SessionConfig) -> int:
    """Run client: validate, measure, report. Returns exit code."""
    try:
        peer = config.validate()
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return ExitCode.CONFIG_ERROR

    try:
        clock = MonotonicClock()
        result = run_session(config, peer, clock)
    except (TransportError, ClockError) as e:
        logger.error(f"Session failed: {e}")
        return ExitCode.SESSION_FAILED

    SessionReport(result=result).print()

    if not result.success:
        return ExitCode.SESSION_FAILED
    if result.received == 0:
        return ExitCode.NO_REPLIES
    return ExitCode.SUCCESS
