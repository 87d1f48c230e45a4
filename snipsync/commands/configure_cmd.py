"""
Configure command - write snipsync settings.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from snipsync.config.settings import BACKENDS, Settings, save_settings


console = Console()


def _show(settings: Settings) -> None:
    table = Table(title="Settings", show_header=False, box=None)
    for section, values in settings.to_dict().items():
        for key, value in values.items():
            table.add_row(f"{section}.{key}", str(value))
    console.print(table)


def configure(
    ctx: typer.Context,
    snippet_file: Optional[str] = typer.Option(None, "--snippet-file", help="Primary snippet file"),
    snippet_dir: Optional[list[str]] = typer.Option(None, "--snippet-dir", help="Snippet directory (repeatable, replaces the list)"),
    sort_by: Optional[str] = typer.Option(None, "--sort-by", help="recency, command, description or output, '-' prefix reverses"),
    backend: Optional[str] = typer.Option(None, "--backend", help="gist, ghe or gitlab"),
    auto_sync: Optional[bool] = typer.Option(None, "--auto-sync/--no-auto-sync", help="Sync after adding a snippet"),
    gist_id: Optional[str] = typer.Option(None, "--gist-id", help="Existing Gist ID"),
    gist_base_url: Optional[str] = typer.Option(None, "--gist-base-url", help="GitHub Enterprise API URL"),
    gitlab_url: Optional[str] = typer.Option(None, "--gitlab-url", help="GitLab instance URL"),
    gitlab_snippet_id: Optional[str] = typer.Option(None, "--gitlab-snippet-id", help="Existing GitLab snippet ID"),
):
    """
    Update settings and create the snippet file if it is missing.
    """
    settings: Settings = ctx.obj["settings"]
    general = settings.general

    if backend is not None and backend not in BACKENDS:
        console.print(f"[red]✗ Unknown backend '{backend}' (expected one of: {', '.join(BACKENDS)})[/red]")
        raise typer.Exit(1)

    updates = [
        (general, "snippet_file", snippet_file),
        (general, "snippet_dirs", snippet_dir or None),
        (general, "sort_by", sort_by),
        (general, "backend", backend),
        (general, "auto_sync", auto_sync),
        (settings.gist, "gist_id", gist_id),
        (settings.gist, "base_url", gist_base_url),
        (settings.gitlab, "url", gitlab_url),
        (settings.gitlab, "snippet_id", gitlab_snippet_id),
    ]
    for section, key, value in updates:
        if value is not None:
            setattr(section, key, value)

    try:
        path = save_settings(settings, ctx.obj.get("config_path"))
        snippet_path = general.snippet_path
        if not snippet_path.exists():
            snippet_path.parent.mkdir(parents=True, exist_ok=True)
            snippet_path.touch()
            console.print(f"[green]✓[/green] Created snippet file: {snippet_path}")
    except OSError as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Settings saved: {path}\n")
    _show(settings)
