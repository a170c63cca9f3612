"""Logging configuration helpers."""

import logging

LOGGER_NAME = "studio_checkout"


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the service logger.

    Repeated calls only adjust the level, so app factories used in tests do
    not stack handlers.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
