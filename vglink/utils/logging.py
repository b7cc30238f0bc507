"""Logging configuration for vglink."""

import logging
import sys
from typing import List, Optional

# Handlers installed by the last setup_logging call
_handlers: List[logging.Handler] = []


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """
    Setup logging configuration for the daemon and CLI.

    Args:
        verbose: Enable verbose/debug logging
        log_file: Optional log file path
    """
    level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    for handler in _handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _handlers.clear()

    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)
    _handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        _handlers.append(file_handler)

    # Every HTTP request to GitLab and Vault would otherwise be logged
    logging.getLogger("urllib3").setLevel(logging.WARNING)
