import logging
import sys
from typing import Union

PACKAGE_LOGGER = "dcmcore"
LOG_FORMAT = '%(asctime)s - %(name)s - [%(levelname)s] - %(message)s'

# silent unless the embedding solver configures logging
logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def setup_logging(level: Union[int, str] = logging.INFO, stream=None):
    """
    Route the constraint core's log records to a stream.

    Only the ``dcmcore`` logger hierarchy is configured, the host
    application's root logger is left alone. Calling it again replaces
    the previously installed handler instead of stacking a second one.

    Args:
        level: A logging level, as a number (logging.DEBUG) or a name ("DEBUG").
        stream: Target stream, stdout by default.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown logging level {level!r}")

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, '_dcmcore_handler', False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._dcmcore_handler = True
    logger.addHandler(handler)
    logger.setLevel(level)


def get_logger(name: str):
    """
    Logger for a dcmcore module, typically called with ``__name__``.

    Module names inside the package already start with ``dcmcore.``; any
    other name is nested under it so records share the package handler.
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
