"""Logging configuration helpers."""

import logging

LOGGER_NAME = "life_dashboard"


def configure_logging(level: int | None = None) -> None:
    """Configure the package logger with a single stream handler.

    An explicit level always applies. Without one, the first call sets INFO and
    later calls leave the level alone, so building the app after the CLI chose
    a level does not reset it.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if level is not None:
        logger.setLevel(level)
    if logger.handlers:
        return
    if level is None:
        logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
