"""CLI application for exo using Rich and Typer."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from exo import __version__
from exo.core.config import (
    CONFIG_KEYS,
    ExoConfig,
    default_config_path,
    get_config_value,
    load_config,
    save_config,
    set_config_value,
    setup_logging,
)
from exo.core.errors import ExoError
from exo.core.factory import build_services
from exo.core.templates import TemplateManager, install_default_templates
from exo.core.types import NoteServices
from exo.notes.daily import create_daily_note, get_or_create_today_note, link_to_daily
from exo.notes.idea import create_idea_note
from exo.notes.zettel import create_zettel_note

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="exo",
    help="Exo - a personal knowledge management system",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Manage configuration")
app.add_typer(config_app, name="config")

console = Console()
err_console = Console(stderr=True)


@dataclass
class CliState:
    """Global options shared by every command."""

    config_path: Optional[Path] = None
    log_level: Optional[str] = None


def _version_callback(value: bool):
    if value:
        console.print(f"exo version {__version__}")
        raise typer.Exit()


def _fail(error: Exception) -> typer.Exit:
    err_console.print(f"[red]Error: {error}[/red]")
    return typer.Exit(1)


def _load(ctx: typer.Context) -> ExoConfig:
    """Load configuration and configure logging from it and the flags."""
    state: CliState = ctx.obj or CliState()
    try:
        config = load_config(state.config_path)
    except ExoError as e:
        raise _fail(e)

    log_config = config.log
    if state.log_level:
        log_config = log_config.model_copy(update={"level": state.log_level})
    setup_logging(log_config)
    return config


def _services(ctx: typer.Context) -> NoteServices:
    return build_services(config=_load(ctx))


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (default: ~/.config/exo/config.yaml)",
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable info logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """Exo is a command-line tool for managing personal knowledge."""
    level = None
    if debug:
        level = "debug"
    elif verbose:
        level = "info"
    elif quiet:
        level = "error"
    ctx.obj = CliState(config_path=config, log_level=level)


@app.command()
def init(
    ctx: typer.Context,
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite existing configuration and templates"
    ),
):
    """Initialize exo configuration, directories and default templates."""
    config = _load(ctx)
    state: CliState = ctx.obj

    config_file = state.config_path or default_config_path()
    try:
        if force or not config_file.exists():
            save_config(config, config_file)
            console.print(f"[green]Wrote configuration:[/green] {config_file}")
        else:
            console.print(f"[dim]Configuration already exists: {config_file}[/dim]")

        dirs = [
            config.dir.data_home,
            config.dir.template_dir,
            config.dir.periodic_dir,
            config.dir.zettel_dir,
            config.dir.inbox_dir,
            config.dir.idea_dir,
        ]
        for directory in dirs:
            path = Path(directory)
            if path.exists():
                console.print(f"[dim]Directory already exists: {path}[/dim]")
                continue
            path.mkdir(parents=True, exist_ok=True)
            console.print(f"[green]Created directory:[/green] {path}")

        installed = install_default_templates(
            config.dir.template_dir,
            force=force,
            confirm=lambda name: Confirm.ask(f"Template {name} exists. Overwrite?"),
        )
    except (ExoError, OSError) as e:
        raise _fail(e)

    for name in installed:
        console.print(f"[green]Installed template:[/green] {name}")
    console.print("[bold green]Initialization completed[/bold green]")


@app.command()
def day(
    ctx: typer.Context,
    on: Optional[str] = typer.Option(
        None, "--date", help="Date of the note as YYYY-MM-DD (default: today)"
    ),
    no_edit: bool = typer.Option(False, "--no-edit", help="Do not open the editor"),
):
    """Create or open a daily note."""
    try:
        target = datetime.strptime(on, "%Y-%m-%d").date() if on else date.today()
    except ValueError:
        raise _fail(ValueError(f"invalid date {on!r}, expected YYYY-MM-DD"))

    services = _services(ctx)
    try:
        note = create_daily_note(target, services)
        console.print(f"[green]Daily note:[/green] {note.path}")
        if not no_edit:
            note.open()
    except ExoError as e:
        raise _fail(e)


@app.command()
def zet(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Title of the Zettel"),
    no_edit: bool = typer.Option(False, "--no-edit", help="Do not open the editor"),
):
    """Create a new Zettelkasten note and link it from today's daily note."""
    services = _services(ctx)
    try:
        note = create_zettel_note(title, services)
        daily = get_or_create_today_note(services)
        link_to_daily(note.title, daily)
        console.print(f"[green]Zettel:[/green] {note.path}")
        console.print(f"[dim]Linked from {daily.path}[/dim]")
        if not no_edit:
            note.open()
    except ExoError as e:
        raise _fail(e)


@app.command()
def idea(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Title of the idea"),
    tag: list[str] = typer.Option([], "--tag", "-t", help="Tag (repeatable)"),
    category: str = typer.Option("", "--category", help="Category"),
    no_edit: bool = typer.Option(False, "--no-edit", help="Do not open the editor"),
):
    """Create and store an idea."""
    services = _services(ctx)
    try:
        note = create_idea_note(title, services, tags=tag, category=category)
        console.print(f"[green]Idea:[/green] {note.path}")
        if not no_edit:
            note.open()
    except ExoError as e:
        raise _fail(e)


@app.command()
def templates(ctx: typer.Context):
    """List available templates."""
    config = _load(ctx)
    manager = TemplateManager(config.dir.template_dir)
    found = manager.list_templates()

    if not found:
        console.print("[dim]No templates found[/dim]")
        return

    table = Table(title="Templates", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="green")
    table.add_column("Source")
    table.add_column("Path", style="dim")
    for info in found:
        source = "[cyan]custom[/cyan]" if info.source == "custom" else "built-in"
        table.add_row(info.name, source, str(info.path))
    console.print(table)


@config_app.callback(invoke_without_command=True)
def config_callback(ctx: typer.Context):
    """Without a subcommand, show all settings."""
    if ctx.invoked_subcommand is None:
        show(ctx)


@config_app.command()
def show(ctx: typer.Context):
    """Show all configuration settings."""
    config = _load(ctx)
    table = Table(title="Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key in CONFIG_KEYS:
        table.add_row(key, get_config_value(config, key))
    console.print(table)


@config_app.command("get")
def config_get(ctx: typer.Context, key: str = typer.Argument(..., help="Setting name")):
    """Get a configuration value."""
    config = _load(ctx)
    try:
        value = get_config_value(config, key)
    except ExoError as e:
        raise _fail(e)
    console.print(f"{key}: {value}")


@config_app.command("set")
def config_set(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Setting name"),
    value: str = typer.Argument(..., help="New value"),
):
    """Set a configuration value and save it."""
    config = _load(ctx)
    state: CliState = ctx.obj
    try:
        updated = set_config_value(config, key, value)
        save_config(updated, state.config_path)
    except ExoError as e:
        raise _fail(e)
    console.print(f"[green]Set {key} to {value}[/green]")


if __name__ == "__main__":
    app()
