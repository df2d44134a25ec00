"""UDP socket setup for udpping.

Contains:
- TransportError: Raised when socket setup fails
- open_client_socket: Open a UDP socket connected to the peer
- open_server_socket: Open a UDP socket bound to a local port
"""

import logging
import socket
import time

from common.config import Peer
from common.protocol import CONNECT_SETTLE_S

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised when socket creation, connect, bind or option setup fails."""

    pass


def open_client_socket(
    peer: Peer,
    poll_timeout_s: float,
    settle_s: float = CONNECT_SETTLE_S,
) -> socket.socket:
    """Open a UDP socket connected to peer with a receive timeout.

    connect() makes the kernel drop datagrams from other sources and performs
    the route lookup up front. The timeout is applied before the socket is
    returned so the receiver never starts with a blocking socket.
    """
    try:
        sock = socket.socket(peer.family, socket.SOCK_DGRAM)
    except OSError as e:
        raise TransportError(f"Socket creation failed: {e}") from e

    try:
        sock.settimeout(poll_timeout_s)
        sock.connect(peer.sockaddr)
    except OSError as e:
        sock.close()
        raise TransportError(f"Connect to {peer.host} failed: {e}") from e

    local = sock.getsockname()
    logger.debug(
        f"Socket: {local[0]}:{local[1]} -> {peer.host}:{peer.sockaddr[1]}, "
        f"timeout={poll_timeout_s * 1000:.0f}ms"
    )
    if settle_s > 0:
        time.sleep(settle_s)
    return sock


def open_server_socket(port: int, bind_address: str, poll_timeout_s: float) -> socket.socket:
    """Open a UDP socket bound to bind_address:port."""
    family = socket.AF_INET6 if ":" in bind_address else socket.AF_INET
    try:
        sock = socket.socket(family, socket.SOCK_DGRAM)
    except OSError as e:
        raise TransportError(f"Socket creation failed: {e}") from e

    try:
        sock.settimeout(poll_timeout_s)
        sock.bind((bind_address, port))
    except OSError as e:
        sock.close()
        raise TransportError(f"Bind to {bind_address}:{port} failed: {e}") from e

    logger.debug(f"Socket bound to {bind_address}:{sock.getsockname()[1]}")
    return sock
