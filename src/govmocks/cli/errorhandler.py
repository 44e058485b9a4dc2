"""CLI error handling utilities."""

from collections.abc import Generator
from contextlib import contextmanager

import typer
from rich.console import Console
from rich.markup import escape

from govmocks.core.exceptions import (
    ConfigError,
    ConfigParseError,
    ConfigValidationError,
    KeyNotFoundError,
    SourceNotFoundError,
)

console = Console(stderr=True)


@contextmanager
def handle_cli_errors(*, debug: bool = False) -> Generator[None, None, None]:
    """Turn configuration errors into a red message and exit code 1.

    Args:
        debug: If True, re-raise so the full traceback is shown.

    """
    try:
        yield
    except (KeyboardInterrupt, SystemExit):
        raise
    except ConfigValidationError as e:
        if debug:
            raise
        console.print(f"[bold red]Invalid configuration:[/bold red] {escape(str(e))}")
        for err in e.errors[1:]:
            console.print(f"  - {escape(err)}")
        raise typer.Exit(1) from e
    except ConfigParseError as e:
        if debug:
            raise
        console.print(f"[bold red]Malformed override source:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except SourceNotFoundError as e:
        if debug:
            raise
        console.print(f"[bold red]Missing source:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except KeyNotFoundError as e:
        if debug:
            raise
        console.print(f"[bold red]Unknown key:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except ConfigError as e:
        if debug:
            raise
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except OSError as e:
        if debug:
            raise
        console.print(f"[bold red]File error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
