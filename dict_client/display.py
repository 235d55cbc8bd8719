"""Rich renderables for lookup results."""

from rich.console import Group
from rich.table import Table
from rich.text import Text

from .models import Database, Definition, MatchingStrategy


def _name_table(title: str, rows: list[tuple[str, str]]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Description")
    for name, description in rows:
        table.add_row(name, description)
    return table


def format_databases(databases: dict[str, Database]) -> Table:
    """Table of databases sorted by name (listings carry no order)."""
    rows = [(db.name, db.description) for db in sorted(databases.values(), key=lambda db: db.name)]
    return _name_table("Databases", rows)


def format_strategies(strategies: list[MatchingStrategy]) -> Table:
    """Table of strategies in server order."""
    return _name_table("Strategies", [(s.name, s.description) for s in strategies])


def format_matches(words: list[str]) -> Text:
    return Text("\n".join(words))


def format_definition(definition: Definition) -> Group:
    """Header line naming the word and database, followed by the body."""
    header = Text()
    header.append(definition.word, style="bold")
    header.append(f"  [{definition.database}]", style="dim")
    return Group(header, Text(definition.text), Text(""))


def format_definitions(definitions: list[Definition]) -> Group:
    return Group(*(format_definition(d) for d in definitions))
