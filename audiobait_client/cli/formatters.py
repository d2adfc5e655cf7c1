"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from audiobait_client.exceptions import is_permanent_error
from audiobait_client.models.config import ClientConfig
from audiobait_client.models.schedule import Schedule

console = Console()


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "AuthenticationError": [
            "• Verify the device name and password in the configuration file.",
            "• The device may not be registered with this server.",
        ],
        "NotAuthenticatedError": [
            "• Set a password or token with `audiobait-client init`.",
        ],
        "ConfigurationError": [
            "• Run `audiobait-client init` to create a configuration file.",
            "• Check the values in the [device] section.",
        ],
        "StorageError": [
            "• Check that the files directory is writable.",
            "• Check the free space on the destination disk.",
        ],
        "DecodeError": [
            "• The server returned an unexpected response.",
            "• Check that the server URL points at the device API.",
        ],
    }

    if error_type in suggestions_map:
        suggestions = suggestions_map[error_type]
    elif context and context.get("type") == "Unexpected":
        suggestions = [
            "• Rerun with -vv to see the full traceback.",
            "• Review the settings with `audiobait-client --show-config`.",
        ]
    elif not is_permanent_error(error):
        suggestions = [
            "• A temporary network or server problem occurred.",
            "• Please try again in a few minutes.",
        ]
    else:
        suggestions = ["• Run the command with -vv for detailed logs."]

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config: ClientConfig):
    """Prints the current configuration, masking credentials."""
    table = Table(box=box.ROUNDED, show_header=False, title=str(config_path))
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key in sorted(ClientConfig.get_ini_keys()):
        value = getattr(config, key)
        if key in ("password", "token") and value:
            value = "********"
        table.add_row(key, str(value))
    console.print(table)


def print_schedule(schedule: Schedule):
    """Prints a schedule summary and one row per combo."""
    console.print(
        Panel(
            f"[bold]{schedule.description or 'Untitled schedule'}[/bold]\n"
            f"Play nights: [cyan]{schedule.play_nights}[/cyan]  "
            f"Files: [cyan]{len(schedule.all_sound_file_ids)}[/cyan]",
            title="Schedule",
            expand=False,
        )
    )
    if not schedule.combos:
        console.print("[dim]No combos in this schedule.[/dim]")
        return

    table = Table(box=box.SIMPLE_HEAVY)
    table.add_column("From", style="green")
    table.add_column("Until", style="green")
    table.add_column("Sounds")
    table.add_column("Waits (s)", justify="right")
    table.add_column("Volumes", justify="right")
    for combo in schedule.combos:
        table.add_row(
            combo.from_,
            combo.until,
            ", ".join(combo.sounds),
            ", ".join(map(str, combo.waits)),
            ", ".join(map(str, combo.volumes)),
        )
    console.print(table)
