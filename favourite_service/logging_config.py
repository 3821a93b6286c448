"""
Logging setup.

Configures structlog once for the process; modules obtain loggers with
``structlog.get_logger(__name__)``.
"""

import logging
import sys

import structlog


def _stderr_logger(*args) -> structlog.PrintLogger:
    # resolved per logger so a swapped sys.stderr is honoured
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: str = "WARNING") -> None:
    """Configure structlog console output filtered at ``level``.
    
    Args:
        level: Standard logging level name, e.g. "INFO"
        
    Raises:
        ValueError: If the level name is unknown
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
