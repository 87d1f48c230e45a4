"""
CLI commands for managing local snippets.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from snipsync.config.settings import Settings
from snipsync.exceptions import SnippetError
from snipsync.snippet.model import Snippet
from snipsync.snippet.store import SnippetStore, filter_by_tags


console = Console()


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj["settings"]


def _render(snippets: list[Snippet], oneline: bool) -> None:
    if not snippets:
        console.print("[yellow]No snippets found[/yellow]")
        return

    if oneline:
        for snippet in snippets:
            tags = f" [cyan]#{' #'.join(snippet.tags)}[/cyan]" if snippet.tags else ""
            console.print(f"[bold]{snippet.description}[/bold]: {snippet.command}{tags}", highlight=False)
        return

    table = Table(show_lines=True)
    table.add_column("Description")
    table.add_column("Command", overflow="fold")
    table.add_column("Tags")
    table.add_column("Output", overflow="fold")
    for snippet in snippets:
        table.add_row(snippet.description, snippet.command, ", ".join(snippet.tags), snippet.output)
    console.print(table)


def list_snippets(
    ctx: typer.Context,
    tag: Optional[list[str]] = typer.Option(None, "--tag", "-t", help="Only show snippets with one of these tags"),
    oneline: bool = typer.Option(False, "--oneline", help="One line per snippet"),
):
    """
    Show all snippets.
    """
    try:
        snippets = SnippetStore.from_settings(_settings(ctx)).load(include_auxiliary=True)
    except SnippetError as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        raise typer.Exit(1)

    if tag:
        snippets = filter_by_tags(snippets, tag)
    _render(snippets, oneline)


def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to look for in commands and descriptions"),
    tag: Optional[list[str]] = typer.Option(None, "--tag", "-t", help="Only search snippets with one of these tags"),
):
    """
    Search snippets by command or description.
    """
    try:
        snippets = SnippetStore.from_settings(_settings(ctx)).load(include_auxiliary=True)
    except SnippetError as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        raise typer.Exit(1)

    if tag:
        snippets = filter_by_tags(snippets, tag)

    needle = query.lower()
    matches = [
        s for s in snippets
        if needle in s.command.lower() or needle in s.description.lower()
    ]
    _render(matches, oneline=True)


def new(
    ctx: typer.Context,
    command: Optional[str] = typer.Option(None, "--command", "-c", help="Command to store"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="What the command does"),
    tag: Optional[list[str]] = typer.Option(None, "--tag", "-t", help="Tag (repeatable)"),
    output: str = typer.Option("", "--output", "-o", help="Example output"),
):
    """
    Add a new snippet to the snippet file.
    """
    settings = _settings(ctx)

    if command is None:
        command = typer.prompt("Command")
    if not command.strip():
        console.print("[red]✗ Error: command must not be empty[/red]")
        raise typer.Exit(1)
    if description is None:
        description = typer.prompt("Description", default="", show_default=False)
    if tag is None:
        raw_tags = typer.prompt("Tags (space separated)", default="", show_default=False)
        tag = raw_tags.split()

    # File order is kept as-is so saving does not re-sort the file
    store = SnippetStore(settings.general.snippet_path, sort_by="recency")
    try:
        snippets = store.load(include_auxiliary=False)
        snippets.append(Snippet(command=command, description=description, tags=list(tag), output=output))
        store.save(snippets)
    except SnippetError as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        raise typer.Exit(1)

    console.print("[green]✓[/green] Snippet added")

    if settings.general.auto_sync:
        from snipsync.commands.sync_cmd import sync
        sync(ctx)
