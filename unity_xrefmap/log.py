"""Logging setup — route the package's log records through Rich."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: int = logging.INFO, console: Console | None = None) -> None:
    """Configure root logging with a Rich handler.

    Args:
        level: Logging severity threshold.
        console: Console to log to; defaults to stderr.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console or Console(stderr=True),
                rich_tracebacks=True,
                show_path=False,
            )
        ],
        force=True,
    )
