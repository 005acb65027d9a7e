"""
Logging configuration for the pk command.

Configures the root logger once with a console handler on stderr so that
log records never interleave with the interactive output on stdout. The
level comes from the caller, ``--verbose`` or ``PORTKILL_LOG_LEVEL``.
"""

import logging
import sys
import threading
from typing import Optional

from portkill.config.settings import log_level_from_env

# Thread-safe lock for logging configuration
_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)
_UNKNOWN_LOGGER_NAME = "<unknown>"

_LEVEL_ALIASES = {
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "TRACE": logging.DEBUG,
}

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_log_level(name: Optional[str]) -> int:
    """Translate a level name into a :mod:`logging` level; unknown names mean INFO."""
    if not name:
        return logging.INFO
    return _LEVEL_ALIASES.get(name.strip().upper(), logging.INFO)


def _close_handlers(logger: logging.Logger, logger_name: Optional[str] = None) -> None:
    """Close all handlers for a logger, logging any errors."""
    for handler in list(logger.handlers):
        try:
            handler.close()
        except OSError as e:
            safe_name = logger_name if logger_name else _UNKNOWN_LOGGER_NAME
            _MODULE_LOGGER.debug("Handler close failed for logger '%s': %s", safe_name, e)


def _reset_root_handlers(root_logger: logging.Logger) -> None:
    _close_handlers(root_logger, "root")
    root_logger.handlers = []


def _build_console_handler(level: int) -> logging.Handler:
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    console_handler.setLevel(level)
    return console_handler


def _suppress_noisy_third_parties() -> None:
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def setup_logging(level: Optional[str] = None, *, verbose: bool = False) -> int:
    """
    Configure logging for the pk command.

    Args:
        level: Explicit level name; overrides the environment
        verbose: Force DEBUG output

    Returns:
        The numeric level that was applied
    """
    if verbose:
        resolved = logging.DEBUG
    elif level is not None:
        resolved = resolve_log_level(level)
    else:
        resolved = resolve_log_level(log_level_from_env())

    with _config_lock:
        root_logger = logging.getLogger()
        _reset_root_handlers(root_logger)
        root_logger.addHandler(_build_console_handler(resolved))
        root_logger.setLevel(resolved)
        _suppress_noisy_third_parties()

    _MODULE_LOGGER.debug("Logging configured at %s", logging.getLevelName(resolved))
    return resolved


__all__ = ["resolve_log_level", "setup_logging"]
