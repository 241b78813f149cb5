"""
Main CLI application using Typer.
"""

from pathlib import Path
from typing import Annotated, List, Optional, Tuple

import pendulum
import typer
from rich.console import Console
from rich.table import Table

from ..adapters.credentials import BcryptCredentialService
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import PersistenceError
from ..logging_config import setup_logging
from ..services.room_service import RoomService
from ..services.sessions import SessionManager
from ..store.room_store import RoomStore

app = typer.Typer(
    name="meetpoll",
    help="Collect availability in shared rooms and find the best meeting time",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")
]


def _load_config(config_file: Optional[Path]) -> Tuple[AppConfig, Path]:
    """
    Load the configuration and the directory relative paths resolve against.

    An explicit ``--config`` must exist; without one, a missing default file
    means built-in defaults.
    """
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file), config_file.parent

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path), default_path.parent

    return AppConfig(), Path.cwd()


def _open_service(config_file: Optional[Path]) -> Tuple[AppConfig, RoomStore, RoomService]:
    """Build the store and service for one command and load the snapshot."""
    try:
        config, base_dir = _load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    setup_logging(config.log_level)

    store = RoomStore(config.resolve_data_file(base_dir))
    try:
        store.load()
    except PersistenceError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    service = RoomService(
        store=store,
        credentials=BcryptCredentialService(rounds=config.bcrypt_rounds),
        sessions=SessionManager(ttl=config.session_ttl()),
        limits=config.limits,
        admin_password=config.admin_password,
        timezone=config.timezone,
    )
    return config, store, service


def _save(service: RoomService) -> None:
    if not service.checkpoint():
        console.print("[bold red]Error:[/bold red] Could not save data. Your change was not stored.")
        raise typer.Exit(1)


def _parse_event(raw: str) -> Tuple[str, str]:
    """Split ``START/END`` into its two timestamps."""
    parts = raw.split("/")
    if len(parts) != 2 or not all(p.strip() for p in parts):
        raise typer.BadParameter(f"Expected START/END, got '{raw}'", param_hint="--event")
    return parts[0].strip(), parts[1].strip()


def _relative_weight(count: int, best: int) -> float:
    """Map a count linearly onto 0..1 between 1 and the best count."""
    if best <= 1:
        return 1.0
    return (count - 1) / (best - 1)


@app.command()
def create(
    code: Annotated[str, typer.Argument(help="Room code (1-32 characters)")],
    password: Annotated[str, typer.Option(
        "--password", "-p",
        prompt=True, confirmation_prompt=True, hide_input=True,
        help="Room password (8-32 characters)"
    )],
    config_file: ConfigOption = None,
):
    """
    Create a new password-protected room.
    """
    _, _, service = _open_service(config_file)

    result = service.create_room(code, password)
    if result.error:
        console.print(f"[bold red]Error:[/bold red] {result.error}")
        raise typer.Exit(1)

    _save(service)
    console.print(f"[green]✓ Room '{code}' created.[/green] Share the code so others can submit.")


@app.command()
def join(
    code: Annotated[str, typer.Argument(help="Room code")],
    config_file: ConfigOption = None,
):
    """
    Check that a room exists.
    """
    _, _, service = _open_service(config_file)

    result = service.join_room(code)
    if result.error:
        console.print(f"[bold red]Error:[/bold red] {result.error}")
        raise typer.Exit(1)

    console.print(f"[green]✓ Room '{code}' found.[/green] Submit with: meetpoll submit {code}")


@app.command()
def submit(
    code: Annotated[str, typer.Argument(help="Room code")],
    events: Annotated[List[str], typer.Option(
        "--event", "-e",
        help="Available range as START/END in ISO-8601, e.g. 2024-11-25T09:00/2024-11-25T10:00. Repeatable."
    )],
    password: Annotated[str, typer.Option(
        "--password", "-p", prompt=True, hide_input=True, help="Room password"
    )],
    name: Annotated[str, typer.Option("--name", "-n", help="Your name (optional)")] = "",
    note: Annotated[str, typer.Option("--note", help="Additional information (optional)")] = "",
    config_file: ConfigOption = None,
):
    """
    Submit your availability to a room.

    Examples:

        meetpoll submit team -e 2024-11-25T09:00/2024-11-25T10:00 --name Ann
    """
    pairs = [_parse_event(raw) for raw in events]

    _, _, service = _open_service(config_file)

    auth = service.authenticate(code, password)
    if auth.redirect:
        console.print("[bold red]Error:[/bold red] That room doesn't exist.")
        raise typer.Exit(1)
    if not auth.success:
        console.print("[bold red]Error:[/bold red] Invalid password")
        raise typer.Exit(1)

    result = service.submit_form(code, auth.token, name, note, pairs)
    if not result.success:
        console.print(f"[bold red]Error:[/bold red] {result.error or 'Submission rejected'}")
        raise typer.Exit(1)

    _save(service)
    console.print(f"[green]✓ Submitted {len(pairs)} range(s) to '{code}'.[/green]")


@app.command()
def view(
    code: Annotated[str, typer.Argument(help="Room code")],
    password: Annotated[str, typer.Option(
        "--password", "-p", prompt=True, hide_input=True, help="Room password"
    )],
    config_file: ConfigOption = None,
):
    """
    Show the best meeting times for a room.
    """
    config, _, service = _open_service(config_file)

    auth = service.authenticate(code, password)
    if auth.redirect:
        console.print("[bold red]Error:[/bold red] That room doesn't exist.")
        raise typer.Exit(1)
    if not auth.success:
        console.print("[bold red]Error:[/bold red] Invalid password")
        raise typer.Exit(1)

    result = service.view_room(code, auth.token)
    if not result.success:
        console.print("[bold red]Error:[/bold red] Could not open room")
        raise typer.Exit(1)

    console.print()
    if not result.ranges:
        console.print("[yellow]⚠ No availability submitted yet.[/yellow]")
    else:
        best = result.ranges[0].count
        table = Table(
            title=f"Availability for '{code}'",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("When", style="bold")
        table.add_column("Participants", justify="right")
        table.add_column("Weight", justify="right", style="dim")
        table.add_column("")

        for entry in result.ranges:
            start = pendulum.parse(entry.start).in_timezone(config.timezone)
            end = pendulum.parse(entry.end).in_timezone(config.timezone)
            table.add_row(
                f"{start.format('ddd DD.MM.YYYY HH:mm')} - {end.format('HH:mm')}",
                str(entry.count),
                f"{_relative_weight(entry.count, best):.2f}",
                "[green]Optimal time[/green]" if entry.optimal else "",
            )

        console.print(table)

    console.print(f"\n[bold]Submissions ({len(result.submissions)}):[/bold]")
    for submission in result.submissions:
        label = f"{submission.name}'s Submission" if submission.name else "Anonymous Submission"
        detail = submission.other or "No additional information"
        console.print(f"  • {label} [dim]- {detail}[/dim]")
    console.print()


@app.command()
def rooms(
    config_file: ConfigOption = None,
):
    """
    List all rooms in the data file.
    """
    _, store, _ = _open_service(config_file)

    codes = store.room_codes()
    if not codes:
        console.print("[yellow]No rooms yet.[/yellow]")
        return

    table = Table(title="Rooms", show_header=True, header_style="bold cyan")
    table.add_column("Code", style="bold yellow")
    table.add_column("Submissions", justify="right")

    for code in codes:
        table.add_row(code, str(len(store.list_forms(code))))

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]meetpoll[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
