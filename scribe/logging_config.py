"""Logging configuration for Scribe.

Provides console logging with appropriate levels for application
code vs third-party libraries.
"""

import logging
import sys
from typing import Literal

from scribe.settings import get_settings

# Third-party loggers that log every request at INFO
NOISY_LOGGERS = [
    "httpcore",
    "httpx",
    "asyncio",
]


def suppress_noisy_loggers() -> None:
    """Suppress noisy third-party loggers."""
    for logger_name in NOISY_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.WARNING)
        logger.handlers.clear()


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None,
) -> None:
    """Configure application logging.

    Sets up logging with:
    - Application logs at configured level
    - Third-party library logs suppressed to WARNING+
    - Clean console output format

    Args:
        level: Override log level (defaults to settings.log_level)
    """
    log_level = level or get_settings().log_level

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all, filter at handler level
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, log_level))
    console_handler.setFormatter(
        logging.Formatter("%(levelname)s | %(name)s | %(message)s")
    )
    root_logger.addHandler(console_handler)

    logging.getLogger("scribe").setLevel(getattr(logging, log_level))

    suppress_noisy_loggers()

