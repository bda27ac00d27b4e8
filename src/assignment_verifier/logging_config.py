"""Console and file logging for the CLI.

The library itself only emits records; `setup_logging` is called once by
the CLI to route them to a rich stderr handler and, optionally, a file.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "assignment_verifier"


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """Route verifier log records to stderr and, if given, to ``log_file``.

    ``quiet`` wins over ``verbose``: quiet shows only shard faults and other
    errors, verbose adds per-table debug summaries and source locations.
    The file handler always gets plain timestamped lines.

    Returns:
        The package root logger, set to the chosen level.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    console = Console(stderr=True)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=console,
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=True,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    return logger
