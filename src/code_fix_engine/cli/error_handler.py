"""Error handling utilities for CLI commands.

This module maps the errors a CLI command can expect (bad configuration,
unreadable or unwritable files) to a console message and an aborted command.
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager

import click
from rich.console import Console
from rich.markup import escape

from code_fix_engine.config.exceptions import ConfigError

logger = logging.getLogger(__name__)
console = Console()


@contextmanager
def handle_cli_errors(action: str) -> Generator[None, None, None]:
    """Context manager for handling expected errors in CLI commands.

    Args:
        action: What the command was doing, used in the error message.

    Yields:
        None

    Raises:
        click.Abort: For configuration and file errors.

    Example:
        with handle_cli_errors("reading response"):
            response = read_text(response_path)
    """
    try:
        yield

    except ConfigError as e:
        console.print(f"[red]❌ Configuration error: {escape(str(e))}[/red]")
        logger.error("Configuration error while %s: %s", action, e)
        raise click.Abort() from e

    except UnicodeDecodeError as e:
        console.print(f"[red]❌ Error {action}: file is not valid UTF-8 text[/red]")
        logger.error("Decode error while %s: %s", action, e)
        raise click.Abort() from e

    except OSError as e:
        console.print(f"[red]❌ Error {action}: {escape(str(e))}[/red]")
        logger.error("File error while %s: %s", action, e)
        raise click.Abort() from e
