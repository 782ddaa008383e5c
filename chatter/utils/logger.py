"""
Logging setup for the chatter service.
"""
import logging
import sys
from typing import Optional

COLORS = {
    logging.DEBUG: "\033[34m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[1;31m",
    logging.CRITICAL: "\033[1;31m",
}
RESET = "\033[0m"


class ColorFormatter(logging.Formatter):
    """Level-coloured "[LEVEL] [module] message" lines."""

    def __init__(self, use_color: bool = True):
        super().__init__("[%(levelname)-7s] [%(name)s] %(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        if not self.use_color:
            return line
        return f"{COLORS.get(record.levelno, '')}{line}{RESET}"


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Configure the root handler once and return a named logger.

    Args:
        name: Logger name, usually __name__
        level: Level name; defaults to settings.LOG_LEVEL
    """
    if level is None:
        from chatter.config import settings
        level = settings.LOG_LEVEL

    root = logging.getLogger()
    if not any(getattr(h, "_chatter", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorFormatter(use_color=sys.stderr.isatty()))
        handler._chatter = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level.upper())

    return logging.getLogger(name)
