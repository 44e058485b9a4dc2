"""Logging configuration for govmocks."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["configure_logging"]

# Logs go to stderr so that exported configuration on stdout stays clean.
console = Console(stderr=True)


def _resolve_level(level_name: str) -> int:
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level_name: str = "INFO") -> None:
    """Configure the root logger once with a Rich handler."""
    root_logger = logging.getLogger()

    handler = next(
        (h for h in root_logger.handlers if isinstance(h, RichHandler) and getattr(h, "_govmocks_managed", False)),
        None,
    )
    if handler is None:
        handler = RichHandler(console=console, rich_tracebacks=True, show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler._govmocks_managed = True  # type: ignore[attr-defined]
        root_logger.addHandler(handler)

    root_logger.setLevel(_resolve_level(level_name))
    logging.captureWarnings(True)