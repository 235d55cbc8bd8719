"""dict-client: a synchronous client for DICT (RFC 2229) dictionary servers.

Architecture:
    caller --> DictClient (one TCP socket, one command at a time)
                   |
                   | TCP, default port 2628
                   | Text protocol: "<code> <text>" status lines,
                   | data blocks ended by a lone "."
                   v
               DICT server (dictd, dict.org, ...)
"""

__version__ = "0.1.0"

from .client import ConnectionState, DictClient
from .errors import (
    DictConnectionError,
    DictError,
    DictProtocolError,
    ErrorKind,
    InvalidDatabaseError,
    InvalidStrategyError,
)
from .models import ALL_DATABASES, FIRST_MATCH, Database, Definition, MatchingStrategy
from .protocol import DEFAULT_PORT, Status, join_atoms, parse_status, split_atoms

__all__ = [
    "ALL_DATABASES",
    "DEFAULT_PORT",
    "FIRST_MATCH",
    "ConnectionState",
    "Database",
    "Definition",
    "DictClient",
    "DictConnectionError",
    "DictError",
    "DictProtocolError",
    "ErrorKind",
    "InvalidDatabaseError",
    "InvalidStrategyError",
    "MatchingStrategy",
    "Status",
    "join_atoms",
    "parse_status",
    "split_atoms",
]
