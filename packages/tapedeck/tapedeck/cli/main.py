"""tapedeck CLI — Entry point.

Usage:
    tapedeck version
    tapedeck recording-id <name>
    tapedeck config show [--config FILE] [--json]
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from tapedeck import __version__
from tapedeck.config import Settings, get_settings
from tapedeck.exceptions import InvalidModeError, InvalidRecordingNameError
from tapedeck.logging import configure_logging
from tapedeck.utils.guid import guid_for_recording
from tapedeck.utils.validators import validate_recording_name

app = typer.Typer(
    name="tapedeck",
    help="tapedeck — HTTP interaction record/replay orchestration.",
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)
config_app = typer.Typer(help="Inspect resolved settings.")
app.add_typer(config_app, name="config")

console = Console()


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the configured log level."),
) -> None:
    settings = get_settings()
    configure_logging(
        level=log_level or settings.logging.level,
        format=settings.logging.format,
        log_file=str(settings.logging.file) if settings.logging.file else None,
    )


@app.command()
def version() -> None:
    """Print the package version."""
    console.print(f"tapedeck {__version__}")


@app.command("recording-id")
def recording_id(
    name: str = typer.Argument(help="Recording name, e.g. 'users/create a user'."),
) -> None:
    """Print the identifier derived from a recording name."""
    try:
        validate_recording_name(name)
    except InvalidRecordingNameError as exc:
        console.print(f"[red]Error: {exc.message}[/red]")
        raise typer.Exit(1)
    console.print(guid_for_recording(name), highlight=False)


@config_app.command("show")
def show_config(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Extra YAML config file."),
    json_output: bool = typer.Option(False, "--json", help="Output raw JSON."),
) -> None:
    """Show the settings every new recording starts from."""
    try:
        settings = Settings.load(config_file=config_file)
    except InvalidModeError as exc:
        console.print(f"[red]Error: {exc.message}[/red]")
        raise typer.Exit(1)
    except ValidationError as exc:
        console.print(f"[red]Error: invalid configuration ({exc.error_count()} error(s))[/red]")
        for error in exc.errors(include_url=False):
            location = ".".join(str(part) for part in error["loc"])
            console.print(f"  {escape(location)}: {escape(error['msg'])}", highlight=False)
        raise typer.Exit(1)

    data = settings.model_dump(mode="json")
    if json_output:
        console.print(Syntax(json.dumps(data, indent=2), "json"))
        return

    table = Table(title="Recording defaults")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in data["recording"].items():
        table.add_row(key, json.dumps(value))
    console.print(table)

    logging_cfg = data["logging"]
    console.print(
        f"Logging: level={logging_cfg['level']} format={logging_cfg['format']} "
        f"file={logging_cfg['file'] or '-'}"
    )


if __name__ == "__main__":
    app()
