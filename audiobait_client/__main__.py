"""
Main entry point for the audiobait-client application.
This module handles top-level setup, exception handling, and CLI invocation.
"""

import asyncio
import logging
import sys

import typer
from rich.console import Console

from audiobait_client.cli import app as cli_app
from audiobait_client.cli.formatters import format_error_with_suggestions
from audiobait_client.exceptions import AudiobaitError


def main() -> None:
    """Main entry point function."""
    log = logging.getLogger("audiobait_client")
    console = Console()

    try:
        cli_app.app()
    except (typer.Exit, typer.Abort):
        pass
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("\n[yellow]⚠️  Operation cancelled by user.[/yellow]")
        sys.exit(0)
    except AudiobaitError as e:
        console.print()
        console.print(format_error_with_suggestions(e))
        sys.exit(1)
    except Exception as e:
        context = {
            "type": "Unexpected",
            "command": " ".join(sys.argv[1:]) or "(none)",
            "config": str(cli_app.CONFIG_FILE),
        }
        console.print()
        console.print(format_error_with_suggestions(e, context))
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
