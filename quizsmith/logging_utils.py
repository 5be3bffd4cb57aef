"""
logging_utils.py - Console logging for the Quizsmith CLI

Library modules only ever call ``logging.getLogger(__name__)``; the CLI
calls ``setup_logging`` once to attach a handler.
"""

import logging


# Message-only; no per-line timestamps
LOG_FORMAT = "%(message)s"

LEVEL_ICONS = {
    logging.DEBUG: "[.]",
    logging.INFO: "[*]",
    logging.WARNING: "[!]",
    logging.ERROR: "[x]",
    logging.CRITICAL: "[x]",
}

LEVEL_NAMES = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class IconLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        icon = LEVEL_ICONS.get(record.levelno, "[*]")
        base = super().format(record)
        return f"{icon} {base}"


def resolve_level(level_name: str = "info", verbosity: int = 0) -> int:
    level = LEVEL_NAMES.get(level_name.lower(), logging.INFO)
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = min(level, logging.INFO)
    return level


def setup_logging(level_name: str = "info", verbosity: int = 0) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(IconLogFormatter(LOG_FORMAT))

    logger = logging.getLogger("quizsmith")
    logger.handlers.clear()
    logger.setLevel(resolve_level(level_name, verbosity))
    logger.addHandler(handler)
    logger.propagate = False
