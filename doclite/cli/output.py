"""CLI output utilities."""

from typing import Any

from rich.console import Console
from rich.table import Table

from doclite.core.models import ID_FIELD, Document, string_form


def print_error(console: Console, message: str) -> None:
    """Print error message."""
    console.print(f"[red]Error:[/red] {message}")


def _columns(documents: list[Document]) -> list[str]:
    columns = [ID_FIELD]
    for doc in documents:
        for key in doc:
            if key not in columns:
                columns.append(key)
    return columns


def _cell(doc: Document, column: str) -> str:
    if column not in doc:
        return ""
    value: Any = doc[column]
    return string_form(value)


def documents_table(documents: list[Document], title: str | None = None) -> Table:
    """Build a table with one row per document and one column per field."""
    table = Table(title=title, show_lines=False)
    columns = _columns(documents)
    for column in columns:
        table.add_column(column, style="cyan" if column == ID_FIELD else None)
    for doc in documents:
        table.add_row(*[_cell(doc, column) for column in columns])
    return table
