#!/usr/bin/env python3
"""UDP round-trip latency and loss measurement tool."""

import argparse
import logging
import sys

from client.runner import run_client
from common.config import SessionConfig
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
    TRACE,
)
from server.runner import DEFAULT_BIND_ADDRESS, run_server

LOG_LEVELS = [logging.INFO, logging.DEBUG, TRACE]


def _configure_logging(verbosity: int) -> None:
    level = LOG_LEVELS[min(verbosity, len(LOG_LEVELS) - 1)]
    logging.basicConfig(level=level)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Measure UDP round-trip latency and packet loss",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -s                          Run as echo server on port 6000
  %(prog)s -c 192.0.2.10               Send 4 probes, one per second
  %(prog)s -c 192.0.2.10 -n 100 -i 0   Send 100 probes back to back
  %(prog)s -c 192.0.2.10 -w 2 -q       Skip the first 2s of replies, summary only
""",
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("-s", "--server", action="store_true", help="Run as a server")
    mode.add_argument(
        "-c", "--client", type=str, metavar="SERVER", help="Connect to the given server address"
    )

    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"UDP port (default: {DEFAULT_PORT})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v debug, -vv trace)",
    )

    server_group = parser.add_argument_group("server options")
    server_group.add_argument(
        "--bind",
        type=str,
        default=DEFAULT_BIND_ADDRESS,
        help=f"Local address to bind (default: {DEFAULT_BIND_ADDRESS})",
    )

    client_group = parser.add_argument_group("client options")
    client_group.add_argument(
        "-n",
        "--count",
        type=int,
        default=DEFAULT_PACKET_COUNT,
        help=f"Number of packets to send (default: {DEFAULT_PACKET_COUNT})",
    )
    client_group.add_argument(
        "-b",
        "--size",
        type=int,
        default=DEFAULT_PAYLOAD_SIZE,
        help=f"UDP payload size in bytes, {MIN_PAYLOAD_SIZE}-{MAX_PAYLOAD_SIZE} "
        f"(default: {DEFAULT_PAYLOAD_SIZE})",
    )
    client_group.add_argument(
        "-i",
        "--interval",
        type=int,
        default=DEFAULT_INTERVAL_MS,
        help=f"Interval between packets in ms, 0 = no pacing (default: {DEFAULT_INTERVAL_MS})",
    )
    client_group.add_argument(
        "-t",
        "--poll-timeout",
        type=int,
        default=DEFAULT_POLL_TIMEOUT_MS,
        help=f"Receiver poll timeout in ms (default: {DEFAULT_POLL_TIMEOUT_MS})",
    )
    client_group.add_argument(
        "-d",
        "--drain",
        type=int,
        default=DEFAULT_DRAIN_MS,
        help=f"Wait for late replies after the last send, in ms (default: {DEFAULT_DRAIN_MS})",
    )
    client_group.add_argument(
        "-w",
        "--warmup",
        type=float,
        default=DEFAULT_WARMUP_S,
        help="Exclude replies from the first N seconds from RTT stats "
        f"(default: {DEFAULT_WARMUP_S:g})",
    )
    client_group.add_argument(
        "-q", "--quiet", action="store_true", help="Only print the final statistics"
    )
    client_group.add_argument(
        "--no-priority",
        action="store_true",
        help="Do not try to raise thread scheduling priority",
    )
    return parser


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()
    _configure_logging(args.verbose)

    if args.server:
        if not 1 <= args.port <= 65535:
            parser.error(f"invalid port {args.port}")
        return run_server(args.port, args.bind)

    config = SessionConfig(
        host=args.client,
        port=args.port,
        packet_count=args.count,
        payload_size=args.size,
        interval_ms=args.interval,
        poll_timeout_ms=args.poll_timeout,
        drain_ms=args.drain,
        warmup_s=args.warmup,
        quiet=args.quiet,
        raise_priority=not args.no_priority,
    )
    return run_client(config)


if __name__ == "__main__":
    sys.exit(main())
