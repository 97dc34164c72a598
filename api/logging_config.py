"""
Centralized logging configuration.

Called once at process start with the configured level. Adds a TRACE level
below DEBUG for per-stage query tracing.
"""
import logging
import sys

from config import LoggingConfig

TRACE = 5

_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
}

_FORMAT = "%(asctime)s | %(levelname)-8s| %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Suppress verbose third-party library logging
_QUIET_LOGGERS = [
    'pymongo',
    'uvicorn.access',
]

logging.addLevelName(TRACE, "TRACE")


def get_log_level(name: str) -> int:
    """Map a settings level name to a logging level (unknown names mean INFO)"""
    return _LEVELS.get((name or "").lower(), logging.INFO)


def configure_logging(config: LoggingConfig, stream=None) -> logging.Logger:
    """Install a single stream handler on the root logger"""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT, _DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(get_log_level(config.level))

    for logger_name in _QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    return root
