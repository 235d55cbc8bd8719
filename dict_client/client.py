"""TCP client for DICT servers (RFC 2229).

One DictClient owns one socket. Every public operation sends a single
command and consumes its whole response (status line, any data blocks,
closing status) before returning, under a lock, so two commands never
interleave on the wire.
"""

import contextlib
import enum
import logging
import socket
import threading
from collections.abc import Iterator

from .errors import (
    DictConnectionError,
    DictError,
    DictProtocolError,
    InvalidDatabaseError,
    InvalidStrategyError,
)
from .models import Database, Definition, MatchingStrategy
from .protocol import (
    BLOCK_TERMINATOR,
    COMMAND_COMPLETE,
    COMMAND_TIMEOUT,
    CONNECTION_TIMEOUT,
    DATABASES_FOLLOW,
    DEFAULT_PORT,
    DEFINITION_FOLLOWS,
    DEFINITIONS_FOLLOW,
    INVALID_DATABASE,
    INVALID_STRATEGY,
    LINE_TERMINATOR,
    MATCHES_FOLLOW,
    MAX_RECV,
    NO_DATABASES,
    NO_MATCH,
    NO_STRATEGIES,
    QUIT,
    SERVER_READY,
    SHOW_DB,
    SHOW_STRAT,
    STRATEGIES_FOLLOW,
    ServerBanner,
    Status,
    define_command,
    match_command,
    parse_banner,
    parse_status,
    split_atoms,
)

logger = logging.getLogger(__name__)


class ConnectionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    READY = "ready"
    CLOSED = "closed"


class DictClient:
    """Synchronous DICT protocol client.

    Usage::

        with DictClient("dict.org") as client:
            for definition in client.define("lexicon", "*"):
                print(definition.database, definition.text)

    A read timeout or any other socket failure is fatal: the client moves
    to CLOSED and a new DictClient is needed, since the protocol has no
    way to resynchronise in the middle of a response.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        *,
        timeout: float = COMMAND_TIMEOUT,
        connect_timeout: float = CONNECTION_TIMEOUT,
    ) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.banner: ServerBanner | None = None
        self._sock: socket.socket | None = None
        self._buffer = b""
        # Not reentrant: public operations must not call each other.
        self._lock = threading.Lock()
        self._state = ConnectionState.DISCONNECTED

    def __enter__(self) -> "DictClient":
        if self._state is ConnectionState.DISCONNECTED:
            self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"DictClient({self.host!r}, {self.port}, state={self._state.value})"

    # --- Connection lifecycle ---

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        """True if the handshake completed and the socket is still usable."""
        return self._state is ConnectionState.READY and self._sock is not None

    def connect(self) -> None:
        """Open the TCP connection and consume the server greeting.

        Raises:
            DictConnectionError: If the client was already used, the
                connection can't be opened, or the greeting isn't a 220.
        """
        with self._lock:
            if self._state is not ConnectionState.DISCONNECTED:
                raise DictConnectionError(
                    f"Cannot connect a client in state {self._state.value}"
                )
            self._state = ConnectionState.CONNECTING

            try:
                self._sock = socket.create_connection(
                    (self.host, self.port), timeout=self.connect_timeout
                )
            except OSError as exc:
                self._state = ConnectionState.CLOSED
                raise DictConnectionError(
                    f"Cannot connect to {self.host}:{self.port}: {exc}"
                ) from exc
            self._buffer = b""

            try:
                status = self._read_status()
            except DictError as exc:
                self._drop()
                raise DictConnectionError(f"Handshake failed: {exc}") from exc

            if status.code != SERVER_READY:
                self._drop()
                raise DictConnectionError(
                    f"Server not ready: {status.code} {status.detail}",
                    code=status.code,
                    detail=status.detail,
                )

            self._sock.settimeout(self.timeout)
            self.banner = parse_banner(status.detail)
            self._state = ConnectionState.READY
            logger.debug("Connected to %s:%d: %s", self.host, self.port, status.detail)

    def close(self) -> None:
        """Send QUIT and close the socket.

        Errors are logged and ignored; the connection is gone either way.
        Safe to call more than once.
        """
        with self._lock:
            if self._sock is None:
                self._state = ConnectionState.CLOSED
                return
            try:
                self._send_line(QUIT)
                self._read_line()
            except DictError as exc:
                logger.debug("Ignoring error while closing: %s", exc)
            finally:
                self._drop()

    # --- Operations ---

    def list_databases(self) -> dict[str, Database]:
        """Return all databases the server offers, keyed by name.

        An empty dict means the server has none (554).
        """
        with self._lock:
            status = self._command(SHOW_DB)
            if status.code == NO_DATABASES:
                return {}
            if status.code != DATABASES_FOLLOW:
                raise self._unexpected(status)

            with self._mid_response():
                lines = self._read_block()
                self._expect_complete()

            databases: dict[str, Database] = {}
            for line in lines:
                name, description = _name_and_description(line)
                databases[name] = Database(name, description)
            return databases

    def list_strategies(self) -> list[MatchingStrategy]:
        """Return the server's matching strategies in listing order."""
        with self._lock:
            status = self._command(SHOW_STRAT)
            if status.code == NO_STRATEGIES:
                return []
            if status.code != STRATEGIES_FOLLOW:
                raise self._unexpected(status)

            with self._mid_response():
                lines = self._read_block()
                self._expect_complete()

            strategies = [MatchingStrategy(*_name_and_description(line)) for line in lines]
            return list(dict.fromkeys(strategies))

    def match(
        self,
        word: str,
        strategy: MatchingStrategy | str,
        database: Database | str,
    ) -> list[str]:
        """Return the distinct words matching ``word`` under ``strategy``.

        Args:
            word: Pattern to match. Sent quoted, without escaping.
            strategy: Strategy record or name, e.g. "prefix".
            database: Database record or name; "*" and "!" are allowed.

        Raises:
            InvalidDatabaseError: On a 550 reply.
            InvalidStrategyError: On a 551 reply.
        """
        command = match_command(_name_of(database), _name_of(strategy), word)
        with self._lock:
            status = self._command(command)
            if status.code == NO_MATCH:
                return []
            if status.code == INVALID_DATABASE:
                raise InvalidDatabaseError(
                    f"Invalid database: {_name_of(database)}",
                    code=status.code,
                    detail=status.detail,
                )
            if status.code == INVALID_STRATEGY:
                raise InvalidStrategyError(
                    f"Invalid strategy: {_name_of(strategy)}",
                    code=status.code,
                    detail=status.detail,
                )
            if status.code != MATCHES_FOLLOW:
                raise self._unexpected(status)

            with self._mid_response():
                lines = self._read_block()
                self._expect_complete()

            words = []
            for line in lines:
                atoms = split_atoms(line)
                if len(atoms) < 2:
                    raise DictProtocolError(f"Malformed match line: {line!r}", detail=line)
                words.append(atoms[1])
            return list(dict.fromkeys(words))

    def define(self, word: str, database: Database | str) -> list[Definition]:
        """Return every definition of ``word`` in server order.

        Raises:
            InvalidDatabaseError: On a 550 reply.
        """
        command = define_command(_name_of(database), word)
        with self._lock:
            status = self._command(command)
            if status.code == NO_MATCH:
                return []
            if status.code == INVALID_DATABASE:
                raise InvalidDatabaseError(
                    f"Invalid database: {_name_of(database)}",
                    code=status.code,
                    detail=status.detail,
                )
            if status.code != DEFINITIONS_FOLLOW:
                raise self._unexpected(status)

            with self._mid_response():
                count = _definition_count(status)
                definitions = []
                for _ in range(count):
                    header = self._read_status()
                    if header.code != DEFINITION_FOLLOWS:
                        raise _unexpected_status(header)
                    atoms = split_atoms(header.detail)
                    if len(atoms) < 2:
                        raise DictProtocolError(
                            f"Malformed definition header: {header.detail!r}",
                            code=header.code,
                            detail=header.detail,
                        )
                    body = self._read_block()
                    definitions.append(Definition(atoms[0], atoms[1], tuple(body)))
                self._expect_complete()
            return definitions

    # --- Internal I/O ---

    def _command(self, line: str) -> Status:
        """Send one command line and read its initial status."""
        if not self.is_connected:
            raise DictConnectionError("Not connected")
        self._send_line(line)
        try:
            return self._read_status()
        except DictProtocolError:
            # Garbage where the status should be; nothing after it can be trusted.
            self._drop()
            raise

    def _unexpected(self, status: Status) -> DictProtocolError:
        """Error for an initial status the command doesn't expect.

        A 1xx code means data and a closing status are still on the wire,
        so the connection is dropped. Final codes leave it ready.
        """
        if 100 <= status.code < 200:
            logger.debug("Unexpected preliminary status %d, dropping connection", status.code)
            self._drop()
        return _unexpected_status(status)

    @contextlib.contextmanager
    def _mid_response(self) -> Iterator[None]:
        # Once data has started flowing a bad line leaves the stream at an
        # unknown position, so the connection can't be reused.
        try:
            yield
        except DictProtocolError:
            logger.debug("Protocol error mid-response, dropping connection")
            self._drop()
            raise

    def _expect_complete(self) -> None:
        status = self._read_status()
        if status.code != COMMAND_COMPLETE:
            raise DictProtocolError(
                f"Expected {COMMAND_COMPLETE}, got {status.code} {status.detail}",
                code=status.code,
                detail=status.detail,
            )

    def _read_status(self) -> Status:
        status = parse_status(self._read_line())
        logger.debug("<- %d %s", status.code, status.detail)
        return status

    def _read_block(self) -> list[str]:
        """Read lines up to the lone "." terminator, which is dropped.

        A data line that is itself just "." can't be told apart from the
        terminator; no dot-stuffing is undone.
        """
        lines = []
        while True:
            line = self._read_line()
            if line == BLOCK_TERMINATOR:
                return lines
            lines.append(line)

    def _send_line(self, line: str) -> None:
        if self._sock is None:
            raise DictConnectionError("Not connected")
        logger.debug("-> %s", line)
        try:
            self._sock.sendall(f"{line}{LINE_TERMINATOR}".encode("utf-8"))
        except OSError as exc:
            self._drop()
            raise DictConnectionError(f"Send failed: {exc}") from exc

    def _read_line(self) -> str:
        """Read one line from the socket, without its CRLF or LF.

        Uses an internal buffer to handle partial reads.

        Raises:
            DictConnectionError: On timeout, EOF, or socket error.
        """
        if self._sock is None:
            raise DictConnectionError("Not connected")

        while b"\n" not in self._buffer:
            try:
                chunk = self._sock.recv(MAX_RECV)
            except socket.timeout as exc:
                self._drop()
                raise DictConnectionError("Timed out waiting for response") from exc
            except OSError as exc:
                self._drop()
                raise DictConnectionError(f"Socket error: {exc}") from exc

            if not chunk:
                self._drop()
                raise DictConnectionError("Server closed connection")

            self._buffer += chunk

        raw, self._buffer = self._buffer.split(b"\n", 1)
        return raw.removesuffix(b"\r").decode("utf-8", errors="replace")

    def _drop(self) -> None:
        """Close the socket without talking to the server."""
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError:
                pass
            self._sock = None
        self._buffer = b""
        self._state = ConnectionState.CLOSED


# --- Helpers ---


def _name_of(item: Database | MatchingStrategy | str) -> str:
    if isinstance(item, str):
        return item
    return item.name


def _name_and_description(line: str) -> tuple[str, str]:
    """Split a SHOW DB / SHOW STRAT line into its name and description."""
    atoms = split_atoms(line)
    if not atoms:
        raise DictProtocolError(f"Empty listing line: {line!r}", detail=line)
    return atoms[0], " ".join(atoms[1:])


def _definition_count(status: Status) -> int:
    """Read ``n`` from a ``150 n definitions retrieved`` status."""
    atoms = split_atoms(status.detail)
    if not atoms or not (atoms[0].isascii() and atoms[0].isdigit()):
        raise DictProtocolError(
            f"Bad definition count: {status.detail!r}",
            code=status.code,
            detail=status.detail,
        )
    return int(atoms[0])


def _unexpected_status(status: Status) -> DictProtocolError:
    return DictProtocolError(
        f"Unexpected status {status.code}: {status.detail}",
        code=status.code,
        detail=status.detail,
    )
