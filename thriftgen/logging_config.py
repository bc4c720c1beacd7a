"""Logging setup shared by every thriftgen module.

Modules obtain their logger with ``get_logger(__name__)``; the CLI calls
``setup_logging`` once to attach a rich handler to the package logger.
"""

import logging

from rich.logging import RichHandler

PACKAGE_LOGGER = "thriftgen"

_configured = False


def setup_logging(level: int | str = logging.WARNING) -> logging.Logger:
    """Attach a RichHandler to the package logger.

    Args:
        level: Logging level name or number.

    Returns:
        The configured package logger.
    """
    global _configured
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    if not _configured:
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
        logger.propagate = False
        _configured = True

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the package logger."""
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
