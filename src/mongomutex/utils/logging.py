"""Logging helpers.

Library modules log through ``library_logger`` and never install output
handlers, so the host application's logging configuration decides where
records go. Entry points (the CLI, example scripts) call ``get_logger`` to get
console output.
"""

from __future__ import annotations

import logging
import sys

from rich.logging import RichHandler


PACKAGE_LOGGER = "mongomutex"


def library_logger(name: str) -> logging.Logger:
    """Logger for library code: propagates to the host's handlers, silent otherwise."""
    logger = logging.getLogger(name)
    if not any(isinstance(handler, logging.NullHandler) for handler in logger.handlers):
        logger.addHandler(logging.NullHandler())
    return logger


def _has_output(logger: logging.Logger) -> bool:
    return any(not isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def get_logger(name: str, level: int = logging.INFO, *, rich: bool = True) -> logging.Logger:
    """Attach console output to ``name`` once and return it.

    Output goes to stderr so that it never mixes with the stdout of a command
    run under the lock.
    """
    logger = logging.getLogger(name)
    if _has_output(logger):
        return logger

    logger.setLevel(level)

    if rich:
        # Lock ids may contain square brackets; keep rich from reading them as markup.
        handler: logging.Handler = RichHandler(
            level=level,
            markup=False,
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(name)s %(levelname)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        )

    logger.addHandler(handler)
    logger.propagate = False
    return logger
