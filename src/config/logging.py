"""Logging configuration for the API server and the chat bot."""

from __future__ import annotations

import logging
from collections.abc import Iterable

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO", *, quiet: Iterable[str] = ()) -> None:
    """Configure the root logger and cap each logger named in `quiet` at WARNING.

    Raw model completions are logged at INFO for diagnostics only and must never be sent back to users.
    """

    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
