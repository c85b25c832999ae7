"""
Logging configuration for facadegen.

Nothing is attached to the ``facadegen`` logger until set_verbosity() or
configure_logging() is called, so applications embedding the client keep full
control over their own logging setup.

Verbosity levels:
- 0: INFO, operation names, models and timings
- 1: INFO, plus the instruction text sent to the service
- 2: DEBUG, plus request URLs, status codes and part counts (never image data)

FACADEGEN_VERBOSITY (0/1/2) is consulted by the CLI; its -v flags take precedence.
"""

import logging
import os

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "facadegen"

# verbosity -> (logger level, log prompt text)
_VERBOSITY_LEVELS: dict[int, tuple[int, bool]] = {
    0: (logging.INFO, False),
    1: (logging.INFO, True),
    2: (logging.DEBUG, True),
}

_log_prompts: bool = False
_handler_installed: bool = False


def _root_logger() -> logging.Logger:
    """Return the package root logger, attaching a stderr handler on first use."""
    global _handler_installed
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not _handler_installed:
        if not root.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(handler)
        _handler_installed = True
    return root


def set_verbosity(level: int) -> None:
    """Set logging verbosity. Values below 0 behave like 0, values above 2 like 2."""
    global _log_prompts
    clamped = max(0, min(level, 2))
    log_level, _log_prompts = _VERBOSITY_LEVELS[clamped]
    _root_logger().setLevel(log_level)


def log_prompts() -> bool:
    """Return True if instruction text should be logged (verbosity 1 or 2)."""
    return _log_prompts


def configure_logging(verbose_level: int = 0, quiet: bool = False) -> None:
    """
    Configure logging from the CLI or from library code.

    quiet wins over verbose_level and limits output to warnings and errors.
    """
    global _log_prompts
    if quiet:
        _root_logger().setLevel(logging.WARNING)
        _log_prompts = False
        return
    set_verbosity(verbose_level)


def get_verbosity_from_env() -> int:
    """Read FACADEGEN_VERBOSITY (0, 1 or 2); anything else yields 0."""
    raw = os.environ.get("FACADEGEN_VERBOSITY", "0").strip()
    return int(raw) if raw in ("1", "2") else 0


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the facadegen hierarchy (e.g. facadegen.core.client)."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


__all__ = [
    "configure_logging",
    "get_logger",
    "get_verbosity_from_env",
    "log_prompts",
    "set_verbosity",
]
