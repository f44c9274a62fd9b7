"""Logging configuration for tagnav.

Modules log through the standard library:
    import logging
    log = logging.getLogger(__name__)

The log level can be configured via the TAGNAV_LOG_LEVEL environment variable:
    - DEBUG: Skipped notes, index rebuilds, debounce decisions
    - INFO: General operational messages (default)
    - WARNING: Unexpected but handled situations (e.g. invalid settings)
    - ERROR: Errors that prevented an operation
"""

import logging
import os
import sys

PACKAGE_LOGGER = "tagnav"


def configure_logging() -> None:
    """Configure logging for the tagnav package.

    Call this once at application startup (the CLI does).
    Subsequent calls are no-ops.
    """
    root_logger = logging.getLogger(PACKAGE_LOGGER)

    if root_logger.handlers:
        return

    level_name = os.environ.get("TAGNAV_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="[%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    # Avoid duplicate messages through the root logger
    root_logger.propagate = False


def set_quiet_mode(quiet: bool) -> None:
    """Only let warnings and errors through when quiet is set."""
    root_logger = logging.getLogger(PACKAGE_LOGGER)
    level = logging.WARNING if quiet else logging.INFO
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)
