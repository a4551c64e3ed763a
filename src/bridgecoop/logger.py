"""Console logging setup shared by the server entry point."""

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def setup_logging(level: str = "INFO") -> None:
    handler = RichHandler(level=level, console=console, rich_tracebacks=True)
    logging.basicConfig(
        level="NOTSET", format="%(message)s", datefmt="[%X]", handlers=[handler]
    )
