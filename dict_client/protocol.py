"""Protocol constants, status-line parsing and atom tokenizing for DICT.

The wire format is fixed by RFC 2229 servers: a status line
``<3-digit code> <text>``, optionally followed by a block of text lines
terminated by a line holding a single ``.``.
"""

import re
from dataclasses import dataclass

from .errors import DictProtocolError


# --- Transport ---

DEFAULT_PORT = 2628

# Commands go out CRLF-terminated; incoming lines may use either.
LINE_TERMINATOR = "\r\n"

# A data block ends with a line holding only this.
BLOCK_TERMINATOR = "."

# --- Timeouts (seconds) ---

COMMAND_TIMEOUT = 30.0
CONNECTION_TIMEOUT = 5.0

# --- Buffer size ---

MAX_RECV = 4096

# --- Commands ---

SHOW_DB = "SHOW DB"
SHOW_STRAT = "SHOW STRAT"
MATCH = "MATCH"
DEFINE = "DEFINE"
QUIT = "QUIT"

# --- Status codes ---

DEFINITIONS_FOLLOW = 150
DEFINITION_FOLLOWS = 151
MATCHES_FOLLOW = 152
DATABASES_FOLLOW = 110
STRATEGIES_FOLLOW = 111
SERVER_READY = 220
CLOSING = 221
COMMAND_COMPLETE = 250
INVALID_DATABASE = 550
INVALID_STRATEGY = 551
NO_MATCH = 552
NO_DATABASES = 554
NO_STRATEGIES = 555


def match_command(database: str, strategy: str, word: str) -> str:
    """Build a MATCH command line. The word is quoted as-is."""
    return f'{MATCH} {database} {strategy} "{word}"'


def define_command(database: str, word: str) -> str:
    """Build a DEFINE command line. The word is quoted as-is."""
    return f'{DEFINE} {database} "{word}"'


# --- Status lines ---

_STATUS_RE = re.compile(r"([0-9]{3}) (.*)", re.DOTALL)


@dataclass(frozen=True, slots=True)
class Status:
    """One parsed status line.

    Attributes:
        code: Three-digit response code.
        detail: Free text after the code and its separating space.
    """

    code: int
    detail: str


def parse_status(line: str) -> Status:
    """Parse a ``<code> <detail>`` status line.

    Args:
        line: A single response line (line terminator already stripped).

    Returns:
        Status with the integer code and the remaining text.

    Raises:
        DictProtocolError: If the line doesn't start with exactly three
            ASCII digits followed by a space.
    """
    match = _STATUS_RE.fullmatch(line)
    if match is None:
        raise DictProtocolError(f"Malformed status line: {line!r}", detail=line)
    return Status(code=int(match.group(1)), detail=match.group(2))


# --- Atoms ---


def split_atoms(line: str) -> list[str]:
    """Split a response line into atoms.

    Whitespace separates atoms. A double-quoted run is part of a single
    atom with the quotes removed and inner whitespace kept, so
    ``abc "gh i" jkl`` gives ``["abc", "gh i", "jkl"]``. An unterminated
    quote swallows the rest of the line. There is no escape processing.
    """
    atoms: list[str] = []
    current: list[str] = []
    in_atom = False
    quoted = False

    for ch in line:
        if quoted:
            if ch == '"':
                quoted = False
            else:
                current.append(ch)
        elif ch == '"':
            quoted = True
            in_atom = True
        elif ch.isspace():
            if in_atom:
                atoms.append("".join(current))
                current = []
                in_atom = False
        else:
            current.append(ch)
            in_atom = True

    if in_atom:
        atoms.append("".join(current))
    return atoms


def quote_atom(atom: str) -> str:
    """Quote an atom if it would not survive split_atoms() bare."""
    if not atom or any(ch.isspace() for ch in atom):
        return f'"{atom}"'
    return atom


def join_atoms(atoms: list[str]) -> str:
    """Inverse of split_atoms() for atoms that contain no double quote."""
    return " ".join(quote_atom(atom) for atom in atoms)


# --- Greeting ---

_BANNER_RE = re.compile(r"<([^<>]*)>\s*(<[^<>]*>)\s*$")


@dataclass(frozen=True, slots=True)
class ServerBanner:
    """Parsed 220 greeting.

    Attributes:
        detail: Full greeting text after the status code.
        capabilities: Dot-separated capability names the server advertised.
        message_id: The trailing ``<...>`` message id, brackets included.
    """

    detail: str
    capabilities: tuple[str, ...]
    message_id: str


def parse_banner(detail: str) -> ServerBanner:
    """Extract capabilities and message id from a greeting, if present."""
    match = _BANNER_RE.search(detail)
    if match is None:
        return ServerBanner(detail=detail, capabilities=(), message_id="")
    capabilities = tuple(cap for cap in match.group(1).split(".") if cap)
    return ServerBanner(
        detail=detail,
        capabilities=capabilities,
        message_id=match.group(2),
    )
