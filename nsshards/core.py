"""Core mechanisms for interacting with the NS API.
See https://www.nationstates.net/pages/api.html for NS API details
"""

# Standard library modules
# Code quality
import logging
import typing as t

# Setup logging
logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def configure_logger(
    loggerObject: logging.Logger,
    *,
    level: t.Union[int, str] = logging.WARNING,
    force: bool = True,
) -> logging.Logger:
    """Performs standard configuration on the provided logger.

    Can be used to configure this modules logger or any user modules logger.

    Adds a default stream handler with a format string containing time, level, name, and message.

    Returns the logger passed.
    """
    FORMAT_STRING = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
    # Only add the handler if forced or none exist
    if force or len(loggerObject.handlers) == 0:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(FORMAT_STRING))
        loggerObject.addHandler(handler)
    # Set logging level
    loggerObject.setLevel(level)
    # Chain object
    return loggerObject


def enable_logging(level: t.Union[int, str] = logging.INFO) -> logging.Logger:
    """Configure root logger using `configure_logger`.

    Returns the root logger.
    """
    return configure_logger(logging.getLogger(), level=level)


def clean_format(string: str) -> str:
    """Casts the string to lowercase and replaces spaces with underscores"""
    return string.lower().replace(" ", "_")


def joined_parameter(*values: str) -> str:
    """Formats the given values into a single string to be passed as a parameter"""
    return "+".join(values)
