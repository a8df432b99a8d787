"""Logging setup shared by the API process and the maintenance scripts."""

import logging
from typing import Union


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Client libraries that log every RPC at INFO.
_NOISY_LOGGERS = ("google.auth", "google.api_core", "urllib3")


def setup_logging(level: Union[int, str] = logging.INFO, debug: bool = False) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    resolved_level = logging.DEBUG if debug else level
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(resolved_level)
        return
    logging.basicConfig(level=resolved_level, format=LOG_FORMAT)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for `name`."""
    return logging.getLogger(name)
