"""Logger setup for the bulk_ingest package.

Components receive a `logging.Logger` through their initializers. Only handler and level
configuration is process-wide.
"""

import logging
import sys

LOGGER_NAME = "bulk_ingest"


def logger_get(name: str | None = None) -> logging.Logger:
    """Return the package logger or one of its children."""

    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)


def logger_configure(log_level: str = "INFO") -> logging.Logger:
    """Attach a stdout handler to the package logger and set its level.

    Calling this more than once only updates the level.

    Args:
        log_level: Level name, case-insensitive.

    Returns:
        logging.Logger: Configured package logger.

    Raises:
        ValueError: Raised when the level name is unknown.
    """

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(log_level.upper())
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        package_logger.addHandler(handler)
    return package_logger
