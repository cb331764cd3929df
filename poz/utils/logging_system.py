"""
Logging setup shared by the poz bot and the discord.py library logger.

Output goes through Rich's handler when stdout is a TTY and through a plain
formatter otherwise; the ANSI formatter is only used if the Rich handler
fails to initialise.  Levels and colour are controlled via environment
variables (``LOG_LEVEL``, ``NO_COLOR``).
"""
import logging
import os
import sys

# ANSI colour codes used only when RichHandler fails to initialise on a TTY
_COLOR = {
    "DEBUG": "\033[37m",  # white
    "INFO": "\033[36m",  # cyan
    "WARNING": "\033[33m",  # yellow
    "ERROR": "\033[31m",  # red
    "CRITICAL": "\033[41m",  # red background
    "RESET": "\033[0m",
}

_PLAIN_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


class _ColoredFormatter(logging.Formatter):
    """ANSI coloured formatter used if the Rich handler fails to initialise."""

    def format(self, record: logging.LogRecord) -> str:
        colour = _COLOR.get(record.levelname, "")
        reset = _COLOR["RESET"]
        message = super().format(record)
        return f"{colour}{message}{reset}"


def _build_handler() -> logging.Handler:
    no_colour = os.getenv("NO_COLOR") is not None
    is_tty = sys.stdout.isatty()

    handler: logging.Handler
    if not no_colour and is_tty:
        try:
            from rich.logging import RichHandler

            handler = RichHandler(
                rich_tracebacks=True,
                show_time=True,
                show_level=True,
                show_path=False,
                markup=False,
            )
            # RichHandler does its own formatting of time/level
            handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        except Exception:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(_ColoredFormatter(_PLAIN_FORMAT, datefmt="%H:%M:%S"))
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT, datefmt="%H:%M:%S"))
    return handler


def setup_log_system(name: str, *, level: str | None = None) -> logging.Logger:
    """
    Create (or return) a configured logger.

    - Honours LOG_LEVEL env var (default INFO) unless a ``level`` is explicitly passed.
    - Uses RichHandler when stdout is a TTY (and NO_COLOR is not set).
    - Avoids duplicate handlers if called multiple times for the same logger.
    """
    level_str = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_str, logging.INFO)

    logger = logging.getLogger(name)
    if logger.handlers:
        logger.setLevel(log_level)
        return logger

    logger.addHandler(_build_handler())
    logger.setLevel(log_level)
    # Module loggers ("poz.tts" etc.) propagate into this one; the root logger
    # carries no handler of ours, so stop here to avoid duplicate output.
    logger.propagate = False
    return logger


# Convenience alias for users who type faster
get_logger = setup_log_system
