"""Logging setup."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install the process-wide log format once."""

    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


__all__ = ["LOG_FORMAT", "configure_logging"]
