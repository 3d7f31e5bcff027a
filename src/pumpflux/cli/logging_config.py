"""Centralized logging configuration for CLI commands."""

import logging
import os


def configure_logging(verbose: bool) -> None:
    """Configure logging levels based on the verbose flag.

    Call once at CLI startup. Configures the root logger and quiets noisy
    third-party libraries.

    Args:
        verbose: If True, show DEBUG+ logs from pumpflux. If False, WARNING+ only.
    """
    # Tests manage their own logging
    if os.getenv("PYTEST_CURRENT_TEST"):
        return

    level = logging.DEBUG if verbose else logging.WARNING
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    else:
        logging.getLogger().setLevel(level)

    # Always silence connection-pool chatter, even in verbose mode
    for logger_name in ["urllib3", "urllib3.connectionpool", "requests"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger("pumpflux").setLevel(level)
