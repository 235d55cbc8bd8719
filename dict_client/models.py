"""Value records returned by the client operations."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Database:
    """A dictionary database offered by the server."""

    name: str
    description: str = ""


@dataclass(frozen=True, slots=True)
class MatchingStrategy:
    """A server-defined word matching algorithm (exact, prefix, ...)."""

    name: str
    description: str = ""


@dataclass(frozen=True, slots=True)
class Definition:
    """One complete definition of a word from one database.

    Attributes:
        word: The headword as the server reported it.
        database: Name of the database the definition came from.
        body: Definition text lines in the order received.
    """

    word: str
    database: str
    body: tuple[str, ...] = ()

    @property
    def text(self) -> str:
        return "\n".join(self.body)


# Request-only pseudo databases; a listing never contains these.
ALL_DATABASES = Database("*", "All databases")
FIRST_MATCH = Database("!", "First database with a match")
