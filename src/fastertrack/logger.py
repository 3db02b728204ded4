"""Logging configuration for FasterTrack."""

import logging
import sys

# Create logger for FasterTrack
logger = logging.getLogger("fastertrack")

# Marks handlers installed by setup_logger
_HANDLER_MARK = "_fastertrack_handler"


def installed_handlers() -> list[logging.Handler]:
    """Return the handlers attached by setup_logger."""
    return [h for h in logger.handlers if getattr(h, _HANDLER_MARK, False)]


def setup_logger(level: int = logging.INFO, handler: logging.Handler | None = None) -> None:
    """Setup the FasterTrack logger with default configuration.

    Args:
        level: Logging level (default: INFO)
        handler: Handler to attach. Defaults to a stdout stream handler.
            The terminal UI passes a handler that does not write to the terminal.
    """
    if installed_handlers():
        # Already configured
        return

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter("fastertrack: %(message)s")
    handler.setFormatter(formatter)
    setattr(handler, _HANDLER_MARK, True)

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def reset_logger() -> None:
    """Detach the handlers of setup_logger so that it can be called again."""
    for handler in installed_handlers():
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
