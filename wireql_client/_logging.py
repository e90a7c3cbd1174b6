"""Package logger for the WireQL SDK"""

import logging

LOGGER_NAME = "wireql_client"
LOG_FORMAT = "[WireQL] %(asctime)s %(levelname)s %(message)s"

logger = logging.getLogger(LOGGER_NAME)
logger.addHandler(logging.NullHandler())


def enable_debug_logging() -> None:
    """Send SDK debug output to stderr (the client's ``debug`` option)"""
    if not any(getattr(h, "_wireql_debug", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._wireql_debug = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
