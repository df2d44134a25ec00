"""Sender loop for udpping.

Emits the configured number of probes at a fixed cadence from the calling
thread. It does not wait for replies.
"""

import logging
import time

from common.clock import Clock
from common.config import SessionConfig
from common.message import encode
from common.protocol import LOG_PROGRESS_INTERVAL, TRACE, DatagramSocket

logger = logging.getLogger(__name__)


class SendError(Exception):
    """Raised when a probe cannot be handed to the socket."""

    pass


class Sender:
    """Paced probe emitter. ``sent`` is valid even after a failure."""

    def __init__(self, sock: DatagramSocket, config: SessionConfig, clock: Clock) -> None:
        self._sock = sock
        self._config = config
        self._clock = clock
        self.sent = 0

    def run(self) -> int:
        """Send all probes. Returns the number sent.

        Raises:
            SendError: If the socket rejects a probe.
            ClockError: If a probe cannot be timestamped.
        """
        count = self._config.packet_count
        interval_s = self._config.interval_s

        for seq in range(count):
            self._send_probe(seq)
            self.sent += 1
            logger.log(TRACE, f"Sender: sent probe {seq + 1}/{count}")
            if (seq + 1) % LOG_PROGRESS_INTERVAL == 0:
                logger.debug(f"Sender: progress {seq + 1}/{count}")

            if interval_s > 0:
                time.sleep(interval_s)

        return self.sent

    def _send_probe(self, seq: int) -> None:
        data = encode(seq, self._clock.now(), self._config.payload_size)
        try:
            self._sock.send(data)
            return
        except ConnectionRefusedError:
            # The kernel rejected this call to report ICMP unreachable for an
            # earlier probe; the report is consumed, so issue this one again
            logger.debug(f"Sender: peer port unreachable before probe {seq}")
        except OSError as e:
            raise SendError(f"Send failed for probe {seq}: {e}") from e

        data = encode(seq, self._clock.now(), self._config.payload_size)
        try:
            self._sock.send(data)
        except OSError as e:
            raise SendError(f"Send failed for probe {seq}: {e}") from e
