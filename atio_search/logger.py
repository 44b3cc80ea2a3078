"""Structured logging via structlog."""

import logging

import structlog


def setup_logging(level: str = "INFO") -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def preview(text: str, length: int = 40) -> str:
    """Shorten user text before it goes into a log line."""
    text = " ".join(text.split())
    return text if len(text) <= length else text[:length] + "..."
