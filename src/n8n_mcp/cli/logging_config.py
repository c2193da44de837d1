"""Logging configuration for CLI commands."""

import logging
import os
from typing import Optional


def configure_logging(verbose: bool, level: Optional[str] = None) -> None:
    """Configure logging levels based on the verbose flag.

    Called once at CLI startup. ``verbose`` shows INFO logs; otherwise only
    WARNING+ unless ``level`` (from LOG_LEVEL or the settings file) asks for
    something else.

    Examples:
        >>> configure_logging(verbose=True)   # Show INFO logs
        >>> configure_logging(verbose=False)  # Only WARNING+ logs
    """
    # Tests manage their own logging
    if os.getenv("PYTEST_CURRENT_TEST"):
        return

    root_level = logging.INFO if verbose else logging.getLevelName(level or "WARNING")
    if not isinstance(root_level, int):
        root_level = logging.WARNING

    if not logging.getLogger().handlers:
        logging.basicConfig(level=root_level, format="%(levelname)s: %(message)s")
    else:
        logging.getLogger().setLevel(root_level)

    # Always silence noisy third-party libraries, even in verbose mode
    for logger_name in ["urllib3", "requests", "mcp", "httpx", "httpcore"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
