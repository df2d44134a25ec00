"""Server runner for udpping.

Contains run_server() which binds the echo socket, reflects datagrams
until SIGINT/SIGTERM or an unrecoverable socket error, and returns an
exit code.
"""

import logging
import signal
from types import FrameType

from common.net import TransportError, open_server_socket
from server.echo import EchoServer

logger = logging.getLogger(__name__)

# Short socket timeout so the loop notices shutdown signals quickly
SERVER_POLL_S = 0.5

DEFAULT_BIND_ADDRESS = "0.0.0.0"


def run_server(port: int, bind_address: str = DEFAULT_BIND_ADDRESS) -> int:
    """Run echo server until signalled. Returns 0 unless a socket error occurs."""
    try:
        sock = open_server_socket(port, bind_address, SERVER_POLL_S)
    except TransportError as e:
        logger.error(f"Failed to open server socket: {e}")
        return 1

    server = EchoServer(sock)

    def handle_signal(_sig: int, _frame: FrameType | None) -> None:
        logger.info("Signal received - shutting down")
        server.stop()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        server.serve_forever()
    except OSError as e:
        logger.error(f"Server socket error: {e}")
        return 1
    finally:
        sock.close()
        logger.info(f"Closed UDP port {port}")

    logger.info("Server shutdown complete")
    return 0
