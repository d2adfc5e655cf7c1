"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from audiobait_client import __version__
from audiobait_client.api.auth import DeviceAuthenticator
from audiobait_client.api.client import DeviceAPIClient
from audiobait_client.api.session import DeviceIdentity, Session
from audiobait_client.core.event_reporter import EventReporter
from audiobait_client.core.resource_fetcher import ResourceFetcher
from audiobait_client.exceptions import AudiobaitError
from audiobait_client.models.config import ClientConfig
from audiobait_client.storage.config_manager import ConfigManager
from audiobait_client.utils.retry import retry_operation

from .formatters import format_error_with_suggestions, print_config, print_schedule

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("audiobait_client")

app = typer.Typer(
    name="audiobait-client",
    help=(
        "Fetch the audio lure schedule and sound files for this device and"
        " report playback events."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "audiobait-client"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """Audiobait device client"""
    if version:
        console.print(
            f"[bold]audiobait-client[/bold] version [cyan]{__version__}[/cyan]"
        )
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("audiobait_client").setLevel(log_level)

    if show_config:
        try:
            config = ConfigManager(CONFIG_FILE).load_config()
        except AudiobaitError as e:
            console.print(format_error_with_suggestions(e))
            raise typer.Exit(code=1) from e
        print_config(CONFIG_FILE, config)
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    server_url: str = typer.Option(..., "--server", help="API server URL."),
    device_name: str = typer.Option(..., "--device", help="Device name."),
    group: str = typer.Option("", "--group", help="Group the device belongs to."),
    password: str = typer.Option("", "--password", help="Device password."),
    token: str = typer.Option(
        "", "--token", help="Access token obtained out-of-band."
    ),
    files_dir: str | None = typer.Option(
        None, "--files-dir", help="Where schedule sound files are stored."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration."
    ),
):
    """Initialize configuration with the device identity and credentials."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    settings = {
        "server_url": server_url,
        "device_name": device_name,
        "group": group,
        "password": password,
        "token": token,
    }
    if files_dir:
        settings["files_dir"] = files_dir
    try:
        ConfigManager(CONFIG_FILE).save_new_config(settings)
    except AudiobaitError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    console.print(f"\n[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


async def open_session(
    config: ClientConfig, api_client: DeviceAPIClient, config_manager: ConfigManager
) -> Session:
    """
    Authenticates with the configured password, or falls back to the
    configured token when there is no password.
    """
    identity = DeviceIdentity(
        server_url=config.server_url,
        group=config.group,
        device_name=config.device_name,
        password=config.password,
    )
    if not config.password:
        log.debug("No password configured; using stored token.")
        return Session.with_token(identity, config.token)

    session = await DeviceAuthenticator(api_client).authenticate(identity)
    if session.just_registered:
        config_manager.save_credentials(session.password, session.access_token)
    return session


def _run(coro_factory, cli_options: dict | None = None):
    """Loads config, runs an async command body and renders failures."""

    async def _run_async():
        config_manager = ConfigManager(CONFIG_FILE)
        config = config_manager.load_config(cli_options)
        async with DeviceAPIClient(config.request_timeout) as api_client:
            session = await open_session(config, api_client, config_manager)
            return await coro_factory(config, api_client, session)

    try:
        return asyncio.run(_run_async())
    except AudiobaitError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


@app.command()
def schedule():
    """Fetch and display the device's audio schedule."""

    async def _schedule(config, api_client, session):
        fetcher = ResourceFetcher(api_client)
        result = await retry_operation(
            lambda: fetcher.get_schedule(session),
            max_attempts=config.max_attempts,
            base_delay=config.retry_base_delay,
            description="Schedule fetch",
        )
        print_schedule(result)

    _run(_schedule)


@app.command()
def sync(
    files_dir: str | None = typer.Option(
        None, "--files-dir", help="Override where sound files are stored."
    ),
):
    """Fetch the schedule and download every sound file it references."""

    async def _sync(config, api_client, session):
        fetcher = ResourceFetcher(api_client)
        result = await retry_operation(
            lambda: fetcher.get_schedule(session),
            max_attempts=config.max_attempts,
            base_delay=config.retry_base_delay,
            description="Schedule fetch",
        )
        destination = Path(config.files_dir).expanduser()
        paths = await retry_operation(
            lambda: fetcher.fetch_all_schedule_files(session, result, destination),
            max_attempts=config.max_attempts,
            base_delay=config.retry_base_delay,
            description="File sync",
        )
        console.print(
            f"[green]✓ {len(paths)} sound files saved to '{destination}'.[/green]"
        )

    _run(_sync, {"files_dir": files_dir})


def _parse_time(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise typer.BadParameter(f"'{value}' is not an ISO-8601 timestamp.") from e


@app.command()
def report(
    details: str = typer.Option(
        ..., "--details", "-d", help="Event details as a JSON object."
    ),
    times: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--time",
        "-t",
        help="ISO-8601 time the event occurred. Repeatable. Defaults to now.",
    ),
):
    """Report an event that occurred at one or more times."""
    occurrences = [_parse_time(t) for t in times] if times else [
        datetime.now(timezone.utc)
    ]

    async def _report(config, api_client, session):
        reporter = EventReporter(api_client)
        await retry_operation(
            lambda: reporter.report_event(session, details, occurrences),
            max_attempts=config.max_attempts,
            base_delay=config.retry_base_delay,
            description="Event report",
        )
        console.print(
            f"[green]✓ Event reported ({len(occurrences)} occurrence(s)).[/green]"
        )

    _run(_report)
