"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging
import os

# Per-request INFO lines from these drown out sync progress.
_CHATTY_LOGGERS = ("httpx", "httpcore", "httpx_retries")


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Configure the root logger.

    ``level`` defaults to ``SEATLEDGER_LOG_LEVEL`` (a level name) or INFO. HTTP
    client libraries are capped at WARNING so a sync pass logs one line per batch
    rather than one per request.
    """

    if level is None:
        name = os.getenv("SEATLEDGER_LOG_LEVEL", "INFO").strip().upper()
        level = logging.getLevelNamesMapping().get(name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for logger_name in _CHATTY_LOGGERS:
        logging.getLogger(logger_name).setLevel(max(level, logging.WARNING))
