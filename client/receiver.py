"""Receiver loop for udpping.

Runs in its own thread from session start until stopped. Each iteration
performs one bounded-wait read, validates the datagram as a probe reply
and folds its RTT into the session statistics.
"""

import logging
import socket
import threading

from common.clock import Clock, ClockError, ticks_to_ms
from common.config import SessionConfig
from common.message import decode
from common.priority import raise_thread_priority
from common.protocol import TRACE, DatagramSocket
from session.report import format_reply
from session.result import SessionStats

logger = logging.getLogger(__name__)


class Receiver:
    """Collects probe replies on a connected UDP socket.

    The socket must already have its receive timeout set; that timeout
    bounds how long stop() takes to be observed.
    """

    def __init__(
        self,
        sock: DatagramSocket,
        config: SessionConfig,
        clock: Clock,
        warmup_end: int,
        host: str | None = None,
    ) -> None:
        self._sock = sock
        self._config = config
        self._clock = clock
        self._warmup_end = warmup_end
        self._host = host or config.host
        # Oversized datagrams must not be truncated down to a matching length
        self._bufsize = config.payload_size + 1
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="receiver", daemon=True)
        self.stats = SessionStats()
        self.error: OSError | None = None

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        """Ask the loop to exit after the current read."""
        self._stop.set()

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def _run(self) -> None:
        if self._config.raise_priority:
            raise_thread_priority("receiver")

        while not self._stop.is_set():
            try:
                self.poll_once()
            except OSError as e:
                self.error = e
                logger.error(f"Receiver: socket error, stopping: {e}")
                break

        logger.debug(
            f"Receiver: stopped ({self.stats.received} received, "
            f"{self.stats.accounted} accounted)"
        )

    def poll_once(self) -> bool:
        """Read at most one datagram. Returns True if a reply was recorded."""
        try:
            data = self._sock.recv(self._bufsize)
        except socket.timeout:
            return False
        except ConnectionRefusedError:
            # ICMP port unreachable for an earlier probe
            logger.debug("Receiver: peer port unreachable")
            return False

        try:
            now = self._clock.now()
        except ClockError as e:
            logger.warning(f"Receiver: cannot timestamp reply: {e}")
            return False

        probe = decode(data, self._config.payload_size)
        if probe is None:
            logger.log(TRACE, f"Receiver: ignored {len(data)}-byte datagram")
            return False

        rtt = now - probe.send_timestamp
        if rtt < 0:
            logger.debug(f"Receiver: ignored reply seq={probe.sequence} from the future")
            return False

        accounted = now >= self._warmup_end
        self.stats.record(rtt, accounted)

        rtt_ms = ticks_to_ms(rtt, self._clock.ticks_per_ms)
        logger.log(TRACE, f"Receiver: seq={probe.sequence} rtt={rtt_ms:.3f}ms accounted={accounted}")
        if not self._config.quiet:
            print(
                format_reply(
                    self._host, self._config.payload_size, probe.sequence, rtt_ms, not accounted
                ),
                flush=True,
            )
        return True
