"""Logging configuration helpers."""

import logging

_LOGGER_NAME = "travel_admin"


def configure_logging(level: int = logging.INFO) -> None:
    """Install a single stream handler on the package logger."""
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
