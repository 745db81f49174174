"""User commands."""

from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from ...core.utils.xml import element_to_python
from ..utils.client import as_records, beanstalk_client, details_table, records_table

console = Console()

USER_COLUMNS = [
    ("ID", "id"),
    ("Login", "login"),
    ("First Name", "first-name"),
    ("Last Name", "last-name"),
    ("Email", "email"),
    ("Admin", "admin"),
]


def list_command(
    page: Optional[int] = typer.Option(None, "--page", "-p", help="Page number"),
):
    """List account users."""
    with beanstalk_client(console) as client:
        users = as_records(element_to_python(client.find_all_users(page=page)))

    if not users:
        console.print("No users found.")
        return

    console.print(records_table(users, USER_COLUMNS))


def show_command(user_id: int = typer.Argument(..., help="User ID")):
    """Show a single user."""
    with beanstalk_client(console) as client:
        records = as_records(element_to_python(client.find_single_user(user_id)))
    _print_user(records)


def me_command():
    """Show the user the credentials belong to."""
    with beanstalk_client(console) as client:
        records = as_records(element_to_python(client.find_current_user()))
    _print_user(records)


def _print_user(records):
    if not records:
        console.print("User not found.")
        return

    user = records[0]
    console.print(
        Panel(details_table(user), title=f"User: {user.get('login', '-')}", expand=False)
    )
