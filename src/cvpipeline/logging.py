"""Logging utilities for the parse pipeline."""

from __future__ import annotations

import logging
import sys

import structlog

_ALIASES = {"warn": "WARNING"}


def resolve_level(level: str) -> int:
    name = _ALIASES.get(level.lower(), level.upper())
    return getattr(logging, name, logging.INFO)


def configure_logging(level: str = "info") -> None:
    """Configure structlog with JSON output on stderr, keeping stdout for results."""
    log_level = resolve_level(level)

    logging.basicConfig(level=log_level, format="%(message)s")

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
