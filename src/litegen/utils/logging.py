import logging
import sys

from pythonjsonlogger import json

_HANDLER_NAME = "litegen-console"


def setup_logging(level: str = "INFO", json_format: bool = False) -> logging.Logger:
    """
    Configure the ``litegen`` logger hierarchy.

    Args:
        level: Log level name (e.g. "INFO", "DEBUG").
        json_format: Emit structured JSON lines instead of bracketed text.

    Returns:
        The configured package logger. Calling this again replaces the console
        handler instead of stacking a second one.
    """
    logger = logging.getLogger("litegen")
    logger.setLevel(level.upper())

    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    if json_format:
        formatter = json.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    else:
        formatter = logging.Formatter("[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger
