"""
Remotestate CLI - Provision and validate remote state backends.
"""

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from .backends import get_initializer
from .models import load_backend_snapshot, load_remote_state
from .settings import get_settings

# Setup
app = typer.Typer(
    name="remotestate",
    help="Provision and validate remote state backends",
    add_completion=False,
)
console = Console()


def configure_logging():
    """Configure logging based on settings."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@app.callback()
def main():
    """Provision and validate remote state backends."""
    configure_logging()


def _create_command_panel(title: str, color: str, config_file: Path, backend: str) -> Panel:
    """Create a Rich Panel for command display.

    Args:
        title: Command title (e.g., "Remote State Init")
        color: Border color (e.g., "blue", "cyan")
        config_file: Remote state config file being processed
        backend: Backend type from the config file

    Returns:
        Formatted Rich Panel
    """
    return Panel.fit(
        f"[bold {color}]{title}[/bold {color}]\n"
        f"Config: {config_file}\n"
        f"Backend: {backend}",
        border_style=color,
    )


def _handle_command_error(e: Exception, command_type: str) -> None:
    """Print a command failure and exit.

    Raises:
        SystemExit: Always exits with code 1
    """
    console.print(
        f"\n[bold red]✗ {command_type.capitalize()} failed:[/bold red] {e}"
    )
    raise typer.Exit(code=1)


def _resolve_state_file(state_file: Path | None) -> Path:
    return state_file or get_settings().backend_state_file


@app.command("needs-init")
def needs_init(
    config_file: Path = typer.Argument(..., help="JSON file with the remote state block"),
    state_file: Path = typer.Option(
        None, "--state-file", help="Local state file recording the current backend"
    ),
):
    """Report whether the backend must be initialized."""
    try:
        remote_state = load_remote_state(config_file)
        console.print(_create_command_panel("Remote State Check", "cyan", config_file, remote_state.backend))

        existing = load_backend_snapshot(_resolve_state_file(state_file))
        initializer = get_initializer(remote_state.backend)
        needed = asyncio.run(initializer.needs_initialization(remote_state, existing))
    except Exception as e:
        _handle_command_error(e, "check")

    if needed:
        console.print("\n[bold yellow]Initialization needed[/bold yellow]")
    else:
        console.print("\n[bold green]✓ Backend is up to date[/bold green]")


@app.command()
def init(
    config_file: Path = typer.Argument(..., help="JSON file with the remote state block"),
    state_file: Path = typer.Option(
        None, "--state-file", help="Local state file recording the current backend"
    ),
    force: bool = typer.Option(
        False, "--force", help="Initialize even if the backend looks up to date"
    ),
):
    """Create the backend's storage if it is missing or the config changed."""
    try:
        remote_state = load_remote_state(config_file)
        console.print(_create_command_panel("Remote State Init", "blue", config_file, remote_state.backend))

        initializer = get_initializer(remote_state.backend)

        async def _run():
            if not force:
                existing = load_backend_snapshot(_resolve_state_file(state_file))
                if not await initializer.needs_initialization(remote_state, existing):
                    return None
            return await initializer.initialize(remote_state)

        result = asyncio.run(_run())
    except Exception as e:
        _handle_command_error(e, "init")

    if result is None:
        console.print("\n[bold green]✓ Backend is up to date, nothing to do[/bold green]")
        return

    console.print("\n[bold green]✓ Backend initialized[/bold green]")
    if result.created:
        console.print("\n[dim]Created:[/dim]")
        for resource in result.created:
            console.print(f"  {resource}")


@app.command("init-args")
def init_args(
    config_file: Path = typer.Argument(..., help="JSON file with the remote state block"),
):
    """Print the backend configuration to forward to the infrastructure tool."""
    try:
        remote_state = load_remote_state(config_file)
        initializer = get_initializer(remote_state.backend)
        args = initializer.get_backend_init_args(remote_state.config)
    except Exception as e:
        _handle_command_error(e, "init-args")

    console.print_json(json.dumps(args))
