"""Centralized logging configuration."""

from __future__ import annotations

import sys

from loguru import logger

log_format = " | ".join(
    (
        "<lk>{time:YYYY-MM-DD HH:mm:ss.SSS}</>",
        "<lvl>{level:<8}</>",
        "<c>{name}::{function}:{line}</>",
        "{message}",
    )
)


def configure_logging(level: str = "INFO") -> None:
    # Drop loguru's default handler so output is not duplicated.
    logger.remove()
    logger.add(sys.stderr, format=log_format, level=level.upper())
