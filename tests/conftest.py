"""Shared test fixtures for the dict-client test suite."""

import socket

import pytest

from dict_client.client import DictClient

GREETING = "220 dict.example.org dictd 1.12.1 <auth.mime> <1234.5678@dict.example.org>"


class FakeSocket:
    """Scripted stand-in for a connected TCP socket.

    Serves ``data`` to recv() at most ``chunk_size`` bytes at a time and
    records everything passed to sendall(). Once the data runs out, recv()
    raises ``recv_error`` if set, otherwise returns b"" (EOF).
    """

    def __init__(self, data: bytes, chunk_size: int = 4096) -> None:
        self.data = data
        self.chunk_size = chunk_size
        self.sent: list[bytes] = []
        self.closed = False
        self.timeout: float | None = None
        self.address: tuple[str, int] | None = None
        self.recv_error: Exception | None = None
        self.send_error: Exception | None = None

    def recv(self, bufsize: int) -> bytes:
        if self.closed:
            raise OSError("recv on closed socket")
        if not self.data:
            if self.recv_error is not None:
                raise self.recv_error
            return b""
        n = min(bufsize, self.chunk_size)
        chunk, self.data = self.data[:n], self.data[n:]
        return chunk

    def sendall(self, data: bytes) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(data)

    def settimeout(self, timeout: float | None) -> None:
        self.timeout = timeout

    def close(self) -> None:
        self.closed = True

    @property
    def sent_lines(self) -> list[str]:
        wire = b"".join(self.sent).decode("utf-8")
        return wire.split("\r\n")[:-1]


def wire(*lines: str) -> bytes:
    return "".join(f"{line}\r\n" for line in lines).encode("utf-8")


@pytest.fixture
def fake_socket(monkeypatch):
    """Install a FakeSocket behind socket.create_connection.

    Call the fixture with the server's response lines; the greeting is
    prepended unless ``greeting=None`` is passed.
    """

    def install(*lines: str, greeting: str | None = GREETING, chunk_size: int = 4096) -> FakeSocket:
        script = (greeting, *lines) if greeting is not None else lines
        sock = FakeSocket(wire(*script), chunk_size=chunk_size)

        def create_connection(address, timeout=None):
            sock.address = address
            sock.timeout = timeout
            return sock

        monkeypatch.setattr(socket, "create_connection", create_connection)
        return sock

    return install


@pytest.fixture
def connected(fake_socket):
    """Return (client, sock) with the handshake already done."""

    def connect(*lines: str, **kwargs) -> tuple[DictClient, FakeSocket]:
        sock = fake_socket(*lines, **kwargs)
        client = DictClient("dict.example.org")
        client.connect()
        return client, sock

    return connect
