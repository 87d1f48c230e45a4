"""
CLI commands for remote synchronization.
"""

import typer
from rich.console import Console

from snipsync.config.settings import BACKENDS
from snipsync.exceptions import RemoteError, SnippetError
from snipsync.sync.gist_client import GistClient
from snipsync.sync.gitlab_client import GitLabClient
from snipsync.sync.sync_manager import create_client, run_sync
from snipsync.sync.token_manager import TokenManager


console = Console()


def sync(ctx: typer.Context):
    """
    Sync the snippet file with the configured remote.
    """
    settings = ctx.obj["settings"]
    settings_path = ctx.obj.get("config_path")

    try:
        run_sync(
            settings,
            console=console,
            client_factory=lambda s: create_client(s, settings_path=settings_path),
        )
    except RemoteError as e:
        console.print(f"[red]✗ Remote error during {e.phase}: {e}[/red]")
        raise typer.Exit(1)
    except SnippetError as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        raise typer.Exit(1)


def set_token(
    ctx: typer.Context,
    backend: str = typer.Argument(..., help="gist, ghe or gitlab"),
    token: str = typer.Argument(..., help="Personal access token"),
):
    """
    Validate and store an access token.
    """
    if backend not in BACKENDS:
        console.print(f"[red]✗ Unknown backend '{backend}' (expected one of: {', '.join(BACKENDS)})[/red]")
        raise typer.Exit(1)

    settings = ctx.obj["settings"]

    console.print("Validating token...", end="")
    try:
        if backend == "gitlab":
            client = GitLabClient(token, url=settings.gitlab.url, verify=not settings.gitlab.skip_ssl)
        else:
            api_base = settings.gist.base_url if backend == "ghe" else None
            client = GistClient(token, api_base=api_base)
        valid = client.test_token()
    except ValueError as e:
        console.print(f" [red]✗ Error: {e}[/red]")
        raise typer.Exit(1)

    if not valid:
        console.print(" [red]✗ Invalid token[/red]")
        raise typer.Exit(1)

    console.print(" [green]✓ Valid[/green]")
    location = TokenManager(backend).set_token(token)
    console.print(f"[green]✓[/green] Token saved: {location}")
