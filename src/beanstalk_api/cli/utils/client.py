"""Client construction and output helpers shared by CLI commands."""

from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Sequence, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...core.api.beanstalk import BeanstalkClient
from ...core.exceptions import BeanstalkError


@contextmanager
def beanstalk_client(console: Console) -> Iterator[BeanstalkClient]:
    """Yield a client built from the environment.

    Library errors are printed and turned into exit status 1.
    """
    try:
        with BeanstalkClient() as client:
            yield client
    except BeanstalkError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def as_records(data: Any) -> List[Dict[str, Any]]:
    """Normalize a converted response into a list of dicts.

    The service wraps single records in their root element, so a list of
    users may come back as ``[{"id": 1, ...}]`` or, for one-item arrays of
    nested records, ``[{"user": {...}}]``.
    """
    if data is None:
        return []
    if isinstance(data, dict):
        data = [data]

    records = []
    for item in data:
        if isinstance(item, dict) and len(item) == 1:
            (inner,) = item.values()
            if isinstance(inner, dict):
                item = inner
        records.append(item)
    return records


def render_value(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    return escape(str(value))


def records_table(
    records: Iterable[Dict[str, Any]], columns: Sequence[Tuple[str, str]]
) -> Table:
    """Build a table with ``(header, key)`` columns."""
    table = Table(show_header=True, header_style="bold")
    for header, _ in columns:
        table.add_column(header, overflow="fold")

    for record in records:
        table.add_row(*(render_value(record.get(key)) for _, key in columns))
    return table


def details_table(record: Dict[str, Any]) -> Table:
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")
    for key, value in record.items():
        if isinstance(value, (dict, list)):
            continue
        table.add_row(key, render_value(value))
    return table
