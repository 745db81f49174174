"""Release commands."""

import typer
from rich.console import Console
from rich.panel import Panel

from ...core.utils.xml import element_to_python
from ..utils.client import as_records, beanstalk_client, records_table

console = Console()

RELEASE_COLUMNS = [
    ("ID", "id"),
    ("Environment", "environment-name"),
    ("Revision", "revision"),
    ("State", "state"),
    ("Author", "author"),
    ("Created At", "created-at"),
]


def list_command(
    repo_id: int = typer.Argument(..., help="Repository ID"),
    page: int = typer.Option(1, "--page", "-p", help="Page number"),
):
    """List releases of a repository."""
    with beanstalk_client(console) as client:
        releases = as_records(element_to_python(client.find_all_releases(repo_id, page)))

    if not releases:
        console.print(f"No releases found for repository {repo_id}.")
        return

    console.print(records_table(releases, RELEASE_COLUMNS))


def retry_command(
    repo_id: int = typer.Argument(..., help="Repository ID"),
    release_id: int = typer.Argument(..., help="Release ID"),
):
    """Retry a failed release."""
    with beanstalk_client(console) as client:
        records = as_records(element_to_python(client.retry_release(repo_id, release_id)))

    state = records[0].get("state", "pending") if records else "pending"
    console.print(
        Panel(
            f"Release [bold]{release_id}[/bold] queued for retry\n\n"
            f"Repository: {repo_id}\n"
            f"State: {state}",
            title="Release Retried",
            expand=False,
        )
    )
