"""Logging setup shared by the CLI, the pipeline and the dashboard."""
from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Chatty third-party loggers that would otherwise print every HTTP call.
_QUIET_LOGGERS = ("urllib3", "requests")


def configure_logging(level: str | None = None) -> None:
    """Initialize root logging for a scoring run.

    The level comes from ``level`` or the ``LOG_LEVEL`` environment variable
    (default ``INFO``). HTTP client loggers stay at ``WARNING`` unless the run
    itself is at ``DEBUG``, so batch progress is readable.
    """

    resolved_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=resolved_level, format=LOG_FORMAT)
    if resolved_level != "DEBUG":
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
