"""Repository commands."""

from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from ...core.utils.xml import element_to_python
from ..utils.client import as_records, beanstalk_client, details_table, records_table

console = Console()

REPOSITORY_COLUMNS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Title", "title"),
    ("Type", "type-id"),
    ("Last Commit", "last-commit-at"),
]


def list_command(
    page: Optional[int] = typer.Option(None, "--page", "-p", help="Page number"),
):
    """List repositories."""
    with beanstalk_client(console) as client:
        repos = as_records(element_to_python(client.find_all_repositories(page=page)))

    if not repos:
        console.print("No repositories found.")
        return

    console.print(records_table(repos, REPOSITORY_COLUMNS))


def show_command(repo_id: int = typer.Argument(..., help="Repository ID")):
    """Show a single repository."""
    with beanstalk_client(console) as client:
        records = as_records(element_to_python(client.find_single_repository(repo_id)))

    if not records:
        console.print("Repository not found.")
        return

    repo = records[0]
    console.print(
        Panel(
            details_table(repo),
            title=f"Repository: {repo.get('name', '-')}",
            expand=False,
        )
    )
