"""Account commands."""

from rich.console import Console
from rich.panel import Panel

from ...core.utils.xml import element_to_python
from ..utils.client import as_records, beanstalk_client, details_table

console = Console()


def account_command():
    """Show account details."""
    with beanstalk_client(console) as client:
        records = as_records(element_to_python(client.get_account_details()))

    if not records:
        console.print("No account details returned.")
        return

    account = records[0]
    console.print(
        Panel(
            details_table(account),
            title=f"Account: {account.get('name', '-')}",
            expand=False,
        )
    )
