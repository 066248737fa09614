"""CLI interface for washrelay.

Provides commands for:
- Starting the relay server
- Simulating machine controller reports
- Inspecting machine state
"""

import click
import httpx
import uvicorn

from washrelay import __version__
from washrelay.client import MachineNotFoundError, RelayClient, RelayClientError
from washrelay.config import get_settings

STATUS_COLORS = {
    "idle": "green",
    "waiting_start": "yellow",
    "running": "blue",
    "finished_wait": "magenta",
}


def _default_url() -> str:
    settings = get_settings()
    return f"http://{settings.host}:{settings.port}"


def _client(url: str | None) -> RelayClient:
    return RelayClient(url or _default_url())


@click.group()
@click.version_option(version=__version__, prog_name="washrelay")
def cli() -> None:
    """washrelay - LINE notifications for shared washing machines."""
    pass


@cli.command()
@click.option("--host", "-h", default=None, help="Host to bind to")
@click.option("--port", "-p", default=None, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the relay server."""
    settings = get_settings()

    actual_host = host or settings.host
    actual_port = port or settings.port

    click.echo(f"Starting washrelay on {actual_host}:{actual_port}")

    uvicorn.run(
        "washrelay.server:create_app",
        factory=True,
        host=actual_host,
        port=actual_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command()
@click.argument("machine_id")
@click.argument("phase", type=click.Choice(["started", "finished"]))
@click.option("--url", default=None, help="Server URL (default: from settings)")
def report(machine_id: str, phase: str, url: str | None) -> None:
    """Send a hardware report for MACHINE_ID, as its controller would."""
    try:
        with _client(url) as client:
            client.report(machine_id, phase)
    except RelayClientError as e:
        raise click.ClickException(str(e)) from e
    except httpx.HTTPError as e:
        raise click.ClickException(f"Request failed: {e}") from e
    click.echo(f"Reported {machine_id} {phase}")


@cli.group()
def machines() -> None:
    """Machine inspection commands."""
    pass


def _echo_machine(machine) -> None:
    status = click.style(machine.status, fg=STATUS_COLORS.get(machine.status))
    user = machine.current_user or "-"
    click.echo(f"  {click.style(machine.machine_id, bold=True):<20} {status:<24} {user}")


@machines.command("list")
@click.option("--url", default=None, help="Server URL (default: from settings)")
def list_machines(url: str | None) -> None:
    """List every known machine."""
    try:
        with _client(url) as client:
            found = client.list_machines()
    except httpx.HTTPError as e:
        raise click.ClickException(f"Request failed: {e}") from e

    if not found:
        click.echo("No machines recorded yet.")
        return

    click.echo(f"Machines ({len(found)}):\n")
    for machine in found:
        _echo_machine(machine)


@machines.command("show")
@click.argument("machine_id")
@click.option("--url", default=None, help="Server URL (default: from settings)")
def show_machine(machine_id: str, url: str | None) -> None:
    """Show the state of MACHINE_ID."""
    try:
        with _client(url) as client:
            machine = client.get_machine(machine_id)
    except MachineNotFoundError as e:
        raise click.ClickException(str(e)) from e
    except httpx.HTTPError as e:
        raise click.ClickException(f"Request failed: {e}") from e

    _echo_machine(machine)
    click.echo(f"  updated at {machine.updated_at}")


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
