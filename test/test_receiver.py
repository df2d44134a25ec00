"""Unit tests for the receiver loop."""

import socket
import time

import pytest

from client.receiver import Receiver
from common.clock import ClockError
from common.config import SessionConfig
from common.message import encode
from conftest import FakeClock, ScriptedSocket

PAYLOAD = 64


def _config(**overrides: object) -> SessionConfig:
    values: dict = {"host": "127.0.0.1", "payload_size": PAYLOAD, "raise_priority": False}
    values.update(overrides)
    return SessionConfig(**values)


def _reply(seq: int, send_ts: int, size: int = PAYLOAD) -> bytes:
    return encode(seq, send_ts, size)


@pytest.mark.unit
class TestPollOnce:
    """Tests for single receive iterations."""

    def test_timeout_is_not_an_error(
        self, scripted_socket: ScriptedSocket, fake_clock: FakeClock
    ) -> None:
        receiver = Receiver(scripted_socket, _config(), fake_clock, warmup_end=0)
        assert receiver.poll_once() is False
        assert receiver.stats.received == 0

    def test_valid_reply_records_rtt(
        self, scripted_socket: ScriptedSocket, fake_clock: FakeClock
    ) -> None:
        receiver = Receiver(scripted_socket, _config(), fake_clock, warmup_end=0)
        scripted_socket.inject(_reply(0, fake_clock.now()))
        fake_clock.advance_ms(2.5)

        assert receiver.poll_once() is True
        assert receiver.stats.received == 1
        assert receiver.stats.accounted == 1
        assert receiver.stats.min_rtt == 2500
        assert receiver.stats.max_rtt == 2500

    def test_wrong_length_ignored(
        self, scripted_socket: ScriptedSocket, fake_clock: FakeClock
    ) -> None:
        receiver = Receiver(scripted_socket, _config(), fake_clock, warmup_end=0)
        scripted_socket.inject(_reply(0, fake_clock.now(), size=PAYLOAD + 8))
        scripted_socket.inject(_reply(1, fake_clock.now(), size=PAYLOAD - 8))

        assert receiver.poll_once() is False
        assert receiver.poll_once() is False
        assert receiver.stats.received == 0

    def test_foreign_datagram_ignored(
        self, scripted_socket: ScriptedSocket, fake_clock: FakeClock
    ) -> None:
        receiver = Receiver(scripted_socket, _config(), fake_clock, warmup_end=0)
        scripted_socket.inject(b"\x00" * PAYLOAD)
        assert receiver.poll_once() is False
        assert receiver.stats.received == 0

    def test_connection_refused_ignored(
        self, scripted_socket: ScriptedSocket, fake_clock: FakeClock
    ) -> None:
        receiver = Receiver(scripted_socket, _config(), fake_clock, warmup_end=0)
        scripted_socket.inject(ConnectionRefusedError())
        assert receiver.poll_once() is False

    def test_future_timestamp_ignored(
        self, scripted_socket: ScriptedSocket, fake_clock: FakeClock
    ) -> None:
        receiver = Receiver(scripted_socket, _config(), fake_clock, warmup_end=0)
        scripted_socket.inject(_reply(0, fake_clock.now() + 10))
        assert receiver.poll_once() is False
        assert receiver.stats.received == 0

    def test_clock_failure_skips_reply(
        self, scripted_socket: ScriptedSocket, fake_clock: FakeClock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        receiver = Receiver(scripted_socket, _config(), fake_clock, warmup_end=0)
        scripted_socket.inject(_reply(0, fake_clock.now()))

        def broken() -> int:
            raise ClockError("clock unavailable")

        monkeypatch.setattr(fake_clock, "now", broken)
        assert receiver.poll_once() is False
        assert receiver.stats.received == 0

    def test_prints_reply_line(
        self, scripted_socket: ScriptedSocket, fake_clock: FakeClock, capsys: pytest.CaptureFixture[str]
    ) -> None:
        receiver = Receiver(scripted_socket, _config(), fake_clock, warmup_end=0, host="echo.local")
        scripted_socket.inject(_reply(7, fake_clock.now()))
        fake_clock.advance_ms(1.0)
        receiver.poll_once()

        assert capsys.readouterr().out == "Reply from echo.local: bytes=64 seq=7 time=1.0ms\n"

    def test_quiet_prints_nothing(
        self, scripted_socket: ScriptedSocket, fake_clock: FakeClock, capsys: pytest.CaptureFixture[str]
    ) -> None:
        receiver = Receiver(scripted_socket, _config(quiet=True), fake_clock, warmup_end=0)
        scripted_socket.inject(_reply(0, fake_clock.now()))
        assert receiver.poll_once() is True
        assert capsys.readouterr().out == ""


@pytest.mark.unit
class TestWarmup:
    """Tests for the warm-up boundary."""

    def test_reply_before_boundary_is_omitted(
        self, scripted_socket: ScriptedSocket, fake_clock: FakeClock, capsys: pytest.CaptureFixture[str]
    ) -> None:
        warmup_end = fake_clock.now() + 1000
        receiver = Receiver(scripted_socket, _config(), fake_clock, warmup_end=warmup_end)
        scripted_socket.inject(_reply(0, fake_clock.now()))
        fake_clock.ticks = warmup_end - 1

        assert receiver.poll_once() is True
        assert receiver.stats.received == 1
        assert receiver.stats.accounted == 0
        assert receiver.stats.min_rtt is None
        assert receiver.stats.total_rtt == 0
        assert "(omitted)" in capsys.readouterr().out

    def test_reply_at_boundary_is_accounted(
        self, scripted_socket: ScriptedSocket, fake_clock: FakeClock
    ) -> None:
        warmup_end = fake_clock.now() + 1000
        receiver = Receiver(scripted_socket, _config(), fake_clock, warmup_end=warmup_end)
        send_ts = fake_clock.now()
        scripted_socket.inject(_reply(0, send_ts))
        fake_clock.ticks = warmup_end

        assert receiver.poll_once() is True
        assert receiver.stats.accounted == 1
        assert receiver.stats.min_rtt == warmup_end - send_ts
        assert receiver.stats.max_rtt == warmup_end - send_ts
        assert receiver.stats.total_rtt == warmup_end - send_ts


@pytest.mark.unit
class TestReceiverThread:
    """Tests for the receiver thread lifecycle."""

    def test_stops_within_poll_interval(
        self, udp_pair: tuple[socket.socket, socket.socket]
    ) -> None:
        client, _peer = udp_pair
        receiver = Receiver(client, _config(poll_timeout_ms=50), FakeClock(), warmup_end=0)
        receiver.start()
        time.sleep(0.1)
        assert receiver.is_alive()

        start = time.monotonic()
        receiver.stop()
        receiver.join(timeout=2)
        assert not receiver.is_alive()
        assert time.monotonic() - start < 1.0
        assert receiver.error is None

    def test_collects_replies_from_socket(
        self, udp_pair: tuple[socket.socket, socket.socket]
    ) -> None:
        client, peer = udp_pair
        clock = FakeClock()
        receiver = Receiver(client, _config(quiet=True), clock, warmup_end=0)
        receiver.start()
        for seq in (2, 0, 1):
            peer.send(_reply(seq, clock.now() - 1000 * (seq + 1)))

        deadline = time.monotonic() + 2
        while receiver.stats.received < 3 and time.monotonic() < deadline:
            time.sleep(0.01)
        receiver.stop()
        receiver.join(timeout=2)

        assert receiver.stats.received == 3
        assert receiver.stats.min_rtt == 1000
        assert receiver.stats.max_rtt == 3000

    def test_socket_error_ends_loop(
        self, scripted_socket: ScriptedSocket, fake_clock: FakeClock
    ) -> None:
        scripted_socket.inject(OSError("bad file descriptor"))
        receiver = Receiver(scripted_socket, _config(), fake_clock, warmup_end=0)
        receiver.start()
        receiver.join(timeout=2)

        assert not receiver.is_alive()
        assert isinstance(receiver.error, OSError)
