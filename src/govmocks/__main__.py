"""Entry point for ``python -m govmocks``."""

from govmocks.cli.app import app

if __name__ == "__main__":
    app()
