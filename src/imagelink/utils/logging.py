"""Console logging for the command line front end."""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

CONSOLE_HANDLER_NAME = "imagelink-console"
_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def attach_console_handler(
    logger_name: str = "imagelink",
    *,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> logging.Handler:
    """Send *logger_name* records to stderr, installing the handler only once.

    Calling again re-levels the existing handler instead of adding another.
    Stdout stays free for command output.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger(logger_name)
    handler = next(
        (h for h in logger.handlers if h.get_name() == CONSOLE_HANDLER_NAME), None
    )
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.set_name(CONSOLE_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    handler.setLevel(level)
    logger.setLevel(level)
    return handler
