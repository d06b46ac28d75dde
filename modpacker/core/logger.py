"""Logging setup shared by every modpacker module."""

import logging
import sys
from logging.handlers import RotatingFileHandler

from modpacker.config import env

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class CustomLogger(logging.Logger):
    """Logger with helpers that attach the current traceback."""

    def error_trace(self, msg, *args, **kwargs) -> None:
        """Log an error message together with the active exception traceback."""
        kwargs.setdefault("exc_info", True)
        self.error(msg, *args, **kwargs)


logging.setLoggerClass(CustomLogger)


def setup_logger(name: str, log_file=None) -> CustomLogger:
    """Return the named logger, attaching handlers on first use.

    Args:
        name: Logger name, usually the calling module's ``__name__``
        log_file: Optional file to log to; defaults to ``LOG_DIR/modpacker.log``
            when ``ENABLE_LOGGING`` is set

    Returns:
        CustomLogger: Configured logger instance
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, env.LOG_LEVEL, logging.INFO))
    logger.propagate = False
    formatter = logging.Formatter(_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is None and env.ENABLE_LOGGING:
        log_file = env.LOG_DIR / "modpacker.log"

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"File logging disabled, cannot open {log_file}: {e}")

    return logger


def set_level(level: int) -> None:
    """Change the level of every modpacker logger (used by ``--verbose``)."""
    for name, candidate in logging.Logger.manager.loggerDict.items():
        if name.startswith("modpacker") and isinstance(candidate, logging.Logger):
            candidate.setLevel(level)
