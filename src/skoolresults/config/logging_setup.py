import logging
from typing import Optional

from skoolresults.config.settings import settings


PACKAGE_LOGGER = "skoolresults"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_handler: Optional[logging.Handler] = None


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a single stream handler to the package logger.

    Meant for applications at startup; the library itself never calls it.
    Calling it again only updates the level.
    """
    global _handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    resolved = (level or settings.log_level).upper()
    logger.setLevel(getattr(logging, resolved, logging.INFO))

    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    if _handler not in logger.handlers:
        logger.addHandler(_handler)

    return logger
