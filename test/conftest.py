"""pytest configuration and fixtures for udpping tests.

Provides:
- FakeClock: Tick source advanced by hand
- ScriptedSocket: In-memory datagram socket with queued receives
- echo_server fixture: Live EchoServer on a loopback ephemeral port
- udp_pair fixture: Two connected loopback UDP sockets
- closed_port fixture: A loopback UDP port with nothing listening
- Markers for unit vs integration tests
"""

import socket
import threading
from collections import deque
from collections.abc import Generator
from pathlib import Path

import pytest

from server.echo import EchoServer


class FakeClock:
    """Clock whose ticks only move when told to. One tick is one microsecond."""

    def __init__(self, start: int = 1_000_000, ticks_per_ms: float = 1000.0) -> None:
        self.ticks = start
        self.ticks_per_ms = ticks_per_ms

    def now(self) -> int:
        return self.ticks

    def advance_ms(self, ms: float) -> None:
        self.ticks += int(ms * self.ticks_per_ms)


class ScriptedSocket:
    """Datagram socket double.

    recv() pops the next scripted item: bytes are returned, exceptions are
    raised, and an empty script raises socket.timeout. send() records data
    and can be told to fail.
    """

    def __init__(self) -> None:
        self.sent: list[bytes] = []
        self.send_errors: deque[Exception] = deque()
        self._incoming: deque[bytes | Exception] = deque()
        self._lock = threading.Lock()

    def inject(self, item: bytes | Exception) -> None:
        with self._lock:
            self._incoming.append(item)

    def send(self, data: bytes, /) -> int:
        with self._lock:
            if self.send_errors:
                raise self.send_errors.popleft()
            self.sent.append(data)
            return len(data)

    def recv(self, bufsize: int, /) -> bytes:
        with self._lock:
            item = self._incoming.popleft() if self._incoming else None
        if item is None:
            raise socket.timeout("timed out")
        if isinstance(item, Exception):
            raise item
        return item[:bufsize]


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test (loopback UDP)")


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scripted_socket() -> ScriptedSocket:
    return ScriptedSocket()


@pytest.fixture
def echo_server() -> Generator[EchoServer, None, None]:
    """Run an EchoServer on 127.0.0.1 in a background thread.

    Yields the server; its port is server.address[1].
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.settimeout(0.05)
    sock.bind(("127.0.0.1", 0))
    server = EchoServer(sock)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.stop()
        thread.join(timeout=5)
        sock.close()


@pytest.fixture
def udp_pair() -> Generator[tuple[socket.socket, socket.socket], None, None]:
    """Two loopback UDP sockets connected to each other.

    The first has a 50ms receive timeout, like a client socket.
    """
    a = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    b = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    a.bind(("127.0.0.1", 0))
    b.bind(("127.0.0.1", 0))
    a.connect(b.getsockname())
    b.connect(a.getsockname())
    a.settimeout(0.05)
    try:
        yield a, b
    finally:
        a.close()
        b.close()


@pytest.fixture
def closed_port() -> int:
    """Return a loopback UDP port that nothing is bound to."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def script_dir() -> Path:
    """Return path to the main script directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def udpping_path(script_dir: Path) -> Path:
    """Return path to udpping.py."""
    return script_dir / "udpping.py"
