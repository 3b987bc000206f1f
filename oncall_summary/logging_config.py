"""Logging setup for the oncall-summary command."""

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, level: str) -> None:
    """
    Route page-fetch and segmentation logs to stderr at the given level.

    Unknown or blank level names fall back to INFO, so a typo in LOG_LEVEL
    never stops a run.
    """
    name = level.strip().upper() or "INFO"
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    logging.basicConfig(level=resolved, format=_LOG_FORMAT)
