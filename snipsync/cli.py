"""
snipsync command line entry point.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from snipsync.commands import configure_cmd, snippet_cmd, sync_cmd
from snipsync.config.settings import expand_path, get_config_path, load_settings
from snipsync.exceptions import ConfigError


app = typer.Typer(help="Personal command-snippet manager with Gist/GitLab sync")
console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, "--config", help="Settings file (default: ~/.config/snipsync/config.toml)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """
    Load settings for every command.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )

    config_path: Path = expand_path(config) if config else get_config_path()
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        raise typer.Exit(1)

    ctx.obj = {"settings": settings, "config_path": config_path}


app.command(name="list")(snippet_cmd.list_snippets)
app.command()(snippet_cmd.search)
app.command()(snippet_cmd.new)
app.command()(sync_cmd.sync)
app.command(name="set-token")(sync_cmd.set_token)
app.command()(configure_cmd.configure)


if __name__ == "__main__":
    app()
