"""Probe encoding/decoding for udpping.

A probe is a fixed 16-byte header followed by padding up to the
configured payload size:
  [4-byte magic][4-byte sequence][8-byte send timestamp][padding]

All integers are little-endian unsigned. The timestamp is in clock ticks of
the sending process and is only meaningful to that process.
"""

from dataclasses import dataclass
from typing import Literal

UINT32_SIZE = 4
UINT64_SIZE = 8
BYTE_ORDER: Literal["little", "big"] = "little"

# Marks a datagram as one of our probes
PROBE_MAGIC = 0xF00D6655
PROBE_MAGIC_BYTES = PROBE_MAGIC.to_bytes(UINT32_SIZE, BYTE_ORDER, signed=False)

# Field offsets
SEQ_OFFSET = UINT32_SIZE
TS_OFFSET = SEQ_OFFSET + UINT32_SIZE
HEADER_SIZE = TS_OFFSET + UINT64_SIZE

SEQ_MODULUS = 1 << 32
TS_MODULUS = 1 << 64


@dataclass(frozen=True)
class Probe:
    """Decoded probe header."""

    sequence: int
    send_timestamp: int


def uint32_to_bytes(value: int) -> bytes:
    """Encode unsigned 32-bit int as little-endian bytes."""
    return value.to_bytes(UINT32_SIZE, BYTE_ORDER, signed=False)


def uint32_from_bytes(data: bytes) -> int:
    """Decode little-endian bytes to unsigned 32-bit int."""
    return int.from_bytes(data, BYTE_ORDER, signed=False)


def uint64_to_bytes(value: int) -> bytes:
    """Encode unsigned 64-bit int as little-endian bytes."""
    return value.to_bytes(UINT64_SIZE, BYTE_ORDER, signed=False)


def uint64_from_bytes(data: bytes) -> int:
    """Decode little-endian bytes to unsigned 64-bit int."""
    return int.from_bytes(data, BYTE_ORDER, signed=False)


def encode(sequence: int, send_timestamp: int, payload_size: int) -> bytes:
    """Encode a probe into exactly payload_size bytes.

    The sequence number wraps at 2**32. Raises ValueError if payload_size
    cannot hold the header or the timestamp does not fit in 64 bits.
    """
    if payload_size < HEADER_SIZE:
        raise ValueError(f"payload_size {payload_size} < header size {HEADER_SIZE}")
    if not 0 <= send_timestamp < TS_MODULUS:
        raise ValueError(f"send_timestamp {send_timestamp} does not fit in 64 bits")

    header = (
        PROBE_MAGIC_BYTES
        + uint32_to_bytes(sequence % SEQ_MODULUS)
        + uint64_to_bytes(send_timestamp)
    )
    # Padding content is irrelevant, only the datagram length matters
    return header + bytes(payload_size - HEADER_SIZE)


def decode(data: bytes, payload_size: int) -> Probe | None:
    """Decode a received datagram.

    Returns the Probe if the datagram is exactly payload_size bytes long
    and starts with the probe magic, otherwise None. Never raises.
    """
    if len(data) != payload_size or len(data) < HEADER_SIZE:
        return None
    if data[:SEQ_OFFSET] != PROBE_MAGIC_BYTES:
        return None

    return Probe(
        sequence=uint32_from_bytes(data[SEQ_OFFSET:TS_OFFSET]),
        send_timestamp=uint64_from_bytes(data[TS_OFFSET:HEADER_SIZE]),
    )
