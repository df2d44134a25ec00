"""UDP echo reflector for udpping.

Receives any datagram and sends the identical bytes back to its source.
Keeps no per-client state.
"""

import logging
import socket
import threading

from common.protocol import LOG_PROGRESS_INTERVAL, TRACE

logger = logging.getLogger(__name__)

# Large enough for any datagram a client may send
RECV_BUFSIZE = 65535


class EchoServer:
    """Reflect datagrams on a bound socket until stopped.

    The socket's timeout decides how often the loop checks for stop().
    """

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._stop = threading.Event()
        self.reflected = 0

    @property
    def address(self) -> tuple:
        return self._sock.getsockname()

    def stop(self) -> None:
        self._stop.set()

    def serve_forever(self) -> None:
        """Run until stop() is called.

        Raises:
            OSError: On an unrecoverable socket error.
        """
        logger.info(f"Server: echoing on {self.address[0]}:{self.address[1]}")
        while not self._stop.is_set():
            self.handle_one()
        logger.info(f"Server: stopped after {self.reflected} datagrams")

    def handle_one(self) -> bool:
        """Reflect at most one datagram. Returns True if one was sent back."""
        try:
            data, addr = self._sock.recvfrom(RECV_BUFSIZE)
        except socket.timeout:
            return False
        except (ConnectionResetError, ConnectionRefusedError):
            # ICMP report about a client that went away
            logger.debug("Server: client unreachable")
            return False

        try:
            self._sock.sendto(data, addr)
        except (ConnectionResetError, ConnectionRefusedError):
            logger.debug(f"Server: {addr[0]}:{addr[1]} unreachable")
            return False

        self.reflected += 1
        logger.log(TRACE, f"Server: reflected {len(data)} bytes to {addr[0]}:{addr[1]}")
        if self.reflected % LOG_PROGRESS_INTERVAL == 0:
            logger.debug(f"Server: progress {self.reflected} datagrams")
        return True
