"""Main CLI entry point for the Beanstalk CLI."""

from typing import Optional

import typer
from importlib import metadata
from rich.console import Console
from rich.panel import Panel


def get_version() -> str:
    """Get the package version from metadata."""
    try:
        return metadata.version("beanstalk-api")
    except metadata.PackageNotFoundError:
        return "unknown"


console = Console()

# command: beanstalk
app = typer.Typer(
    name="beanstalk",
    help="Beanstalk CLI - inspect repositories, users and releases",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# command: beanstalk <command>


@app.command("account")
def account_cmd():
    """Show account details."""
    from .commands.account import account_command

    return account_command()


# command: beanstalk users
users_app = typer.Typer(
    name="users",
    help="Account user commands",
    no_args_is_help=True,
)


@users_app.command("list")
def users_list_cmd(
    page: Optional[int] = typer.Option(None, "--page", "-p", help="Page number"),
):
    """List account users."""
    from .commands.users import list_command

    return list_command(page)


@users_app.command("show")
def users_show_cmd(user_id: int = typer.Argument(..., help="User ID")):
    """Show a single user."""
    from .commands.users import show_command

    return show_command(user_id)


@users_app.command("me")
def users_me_cmd():
    """Show the user the credentials belong to."""
    from .commands.users import me_command

    return me_command()


# command: beanstalk repos
repos_app = typer.Typer(
    name="repos",
    help="Repository commands",
    no_args_is_help=True,
)


@repos_app.command("list")
def repos_list_cmd(
    page: Optional[int] = typer.Option(None, "--page", "-p", help="Page number"),
):
    """List repositories."""
    from .commands.repositories import list_command

    return list_command(page)


@repos_app.command("show")
def repos_show_cmd(repo_id: int = typer.Argument(..., help="Repository ID")):
    """Show a single repository."""
    from .commands.repositories import show_command

    return show_command(repo_id)


# command: beanstalk releases
releases_app = typer.Typer(
    name="releases",
    help="Release commands",
    no_args_is_help=True,
)


@releases_app.command("list")
def releases_list_cmd(
    repo_id: int = typer.Argument(..., help="Repository ID"),
    page: int = typer.Option(1, "--page", "-p", help="Page number"),
):
    """List releases of a repository."""
    from .commands.releases import list_command

    return list_command(repo_id, page)


@releases_app.command("retry")
def releases_retry_cmd(
    repo_id: int = typer.Argument(..., help="Repository ID"),
    release_id: int = typer.Argument(..., help="Release ID"),
):
    """Retry a failed release."""
    from .commands.releases import retry_command

    return retry_command(repo_id, release_id)


app.add_typer(users_app, name="users")
app.add_typer(repos_app, name="repos")
app.add_typer(releases_app, name="releases")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", help="Show version"),
):
    """Beanstalk CLI - inspect repositories, users and releases."""
    if version:
        console.print(f"Beanstalk CLI v{get_version()}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(
            Panel(
                "[bold blue]Beanstalk CLI[/bold blue]\n\n"
                "Reads credentials from BEANSTALK_ACCOUNT, BEANSTALK_USERNAME\n"
                "and BEANSTALK_PASSWORD.\n\n"
                "Use [bold]beanstalk --help[/bold] to see available commands.",
                title="Welcome",
                expand=False,
            )
        )


if __name__ == "__main__":
    app()
