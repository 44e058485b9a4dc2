"""Command line interface for govmocks."""

from govmocks.cli.app import app

__all__ = ["app"]
