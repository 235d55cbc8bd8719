"""Exception types raised by the DICT client.

Everything derives from DictError, so callers can catch one type and
branch on ``kind`` when they care which failure it was.
"""

import enum


class ErrorKind(enum.Enum):
    CONNECTION = "connection"
    PROTOCOL = "protocol"
    INVALID_DATABASE = "invalid_database"
    INVALID_STRATEGY = "invalid_strategy"


class DictError(Exception):
    """Base class for all client failures.

    Attributes:
        kind: Which failure class this is.
        code: Status code the server sent, when one was involved.
        detail: Text the server sent alongside the code, if any.
    """

    kind: ErrorKind = ErrorKind.PROTOCOL

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.detail = detail


class DictConnectionError(DictError):
    """Raised when the socket or handshake fails or the server goes away."""

    kind = ErrorKind.CONNECTION


class DictProtocolError(DictError):
    """Raised on a malformed status line or an unexpected status code."""

    kind = ErrorKind.PROTOCOL


class InvalidDatabaseError(DictError):
    """Raised when the server rejects the database name (550)."""

    kind = ErrorKind.INVALID_DATABASE


class InvalidStrategyError(DictError):
    """Raised when the server rejects the strategy name (551)."""

    kind = ErrorKind.INVALID_STRATEGY
