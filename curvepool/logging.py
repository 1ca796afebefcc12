"""structlog setup for the API and CLI entrypoints."""

import logging

import structlog


def configure_logging(level: str | int = logging.INFO) -> None:
    """Configure structlog with level filtering, ISO timestamps and console output.

    Args:
        level: Level name ("DEBUG", "INFO", ...) or logging level number

    Raises:
        ValueError: If a level name is unknown
    """
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        level = numeric

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
