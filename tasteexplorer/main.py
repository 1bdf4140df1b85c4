from __future__ import annotations

"""CLI entry point for taste-explorer (`python -m tasteexplorer.main`)."""

import sys

from .app.cli import main


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
