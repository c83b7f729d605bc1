"""Logging setup for the sleep_tracker logger hierarchy."""

import logging


def configure_logging() -> None:
    """Attach one stream handler to the sleep_tracker logger, once."""
    logger = logging.getLogger("sleep_tracker")
    logger.setLevel(logging.INFO)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
