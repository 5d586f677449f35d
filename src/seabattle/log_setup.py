"""Process-wide logging configuration.

Library modules only ever do ``logger = logging.getLogger(__name__)``; the CLI
calls :func:`configure_logging` once at start-up, which attaches an
append-only file handler to the ``seabattle`` logger and stamps a session
header so separate runs are easy to tell apart in the same file.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
SESSION_HEADER = "==== session started pid=%d ===="

_ROOT_NAME = "seabattle"


def console_level(*, debug: bool = False, verbose: int = 0, quiet: bool = False) -> int:
    """Map the CLI verbosity flags to a logging level."""
    if quiet:
        return logging.ERROR
    if debug:
        return logging.DEBUG
    if verbose >= 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(
    log_file: Optional[Path],
    *,
    debug: bool = False,
    verbose: int = 0,
    quiet: bool = False,
) -> logging.Logger:
    """Attach file + console handlers to the package logger and write the session header."""
    logger = logging.getLogger(_ROOT_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level(debug=debug, verbose=verbose, quiet=quiet))
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            logger.warning("Cannot open log file %s (%s); logging to console only", log_file, exc)
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    logger.info(SESSION_HEADER, os.getpid())
    return logger
