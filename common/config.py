"""Session configuration for udpping.

Contains:
- ConfigError: Raised for invalid configuration
- SessionConfig: Immutable parameters for one client run
- Peer: Resolved peer address
- resolve_peer: Resolve host/port to a socket address
"""

import ipaddress
import logging
import math
import socket
from dataclasses import dataclass

from common.protocol import (
    DEFAULT_DRAIN_MS,
    DEFAULT_INTERVAL_MS,
    DEFAULT_PACKET_COUNT,
    DEFAULT_PAYLOAD_SIZE,
    DEFAULT_POLL_TIMEOUT_MS,
    DEFAULT_PORT,
    DEFAULT_WARMUP_S,
    MAX_PAYLOAD_SIZE,
    MIN_PAYLOAD_SIZE,
)

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the session configuration is invalid."""

    pass


@dataclass(frozen=True)
class Peer:
    """Resolved peer address."""

    family: socket.AddressFamily
    sockaddr: tuple  # (host, port) or (host, port, flowinfo, scope_id)

    @property
    def host(self) -> str:
        return self.sockaddr[0]


@dataclass(frozen=True)
class SessionConfig:
    """Parameters for a client session. Never mutated once created."""

    host: str
    port: int = DEFAULT_PORT
    packet_count: int = DEFAULT_PACKET_COUNT
    payload_size: int = DEFAULT_PAYLOAD_SIZE
    interval_ms: int = DEFAULT_INTERVAL_MS  # <= 0 disables pacing
    poll_timeout_ms: int = DEFAULT_POLL_TIMEOUT_MS
    drain_ms: int = DEFAULT_DRAIN_MS
    warmup_s: float = DEFAULT_WARMUP_S
    quiet: bool = False
    raise_priority: bool = True

    @property
    def interval_s(self) -> float:
        return self.interval_ms / 1000

    @property
    def poll_timeout_s(self) -> float:
        return self.poll_timeout_ms / 1000

    @property
    def drain_s(self) -> float:
        return self.drain_ms / 1000

    def validate(self) -> Peer:
        """Check all values and resolve the peer address.

        Returns the resolved Peer. Raises ConfigError on the first problem
        found. Does not open any socket.
        """
        if not 1 <= self.port <= 65535:
            raise ConfigError(f"Invalid port {self.port} (must be 1-65535)")
        if self.packet_count < 1:
            raise ConfigError(f"Invalid packet count {self.packet_count} (must be >= 1)")
        if not MIN_PAYLOAD_SIZE <= self.payload_size <= MAX_PAYLOAD_SIZE:
            raise ConfigError(
                f"Invalid packet size {self.payload_size} "
                f"(must be {MIN_PAYLOAD_SIZE}-{MAX_PAYLOAD_SIZE})"
            )
        if not math.isfinite(self.poll_timeout_ms) or self.poll_timeout_ms <= 0:
            raise ConfigError(
                f"Invalid poll timeout {self.poll_timeout_ms}ms (must be finite and > 0)"
            )
        if not math.isfinite(self.drain_ms) or self.drain_ms < 0:
            raise ConfigError(
                f"Invalid drain duration {self.drain_ms}ms (must be finite and >= 0)"
            )
        if not math.isfinite(self.warmup_s) or self.warmup_s < 0:
            raise ConfigError(
                f"Invalid warm-up duration {self.warmup_s}s (must be finite and >= 0)"
            )

        return resolve_peer(self.host, self.port)


def resolve_peer(host: str, port: int) -> Peer:
    """Resolve host and port to the first datagram-capable address."""
    if not host:
        raise ConfigError("Invalid server address: empty")
    try:
        infos = socket.getaddrinfo(host, port, socket.AF_UNSPEC, socket.SOCK_DGRAM)
    except (socket.gaierror, UnicodeError) as e:
        raise ConfigError(f"Invalid server address {host!r}: {e}") from e

    for family, _type, _proto, _canon, sockaddr in infos:
        if family in (socket.AF_INET, socket.AF_INET6):
            address = ipaddress.ip_address(sockaddr[0].split("%")[0])
            if address.is_unspecified:
                raise ConfigError(f"Invalid server address {host!r}: unspecified address")
            logger.debug(f"Resolved {host} -> {sockaddr[0]} ({family.name})")
            return Peer(family=family, sockaddr=sockaddr)

    raise ConfigError(f"Invalid server address {host!r}: no IPv4/IPv6 address")
