"""
Error handling for the CLI.

Maps library exceptions to exit codes and user-facing messages so command
bodies stay free of try/except for known errors.
"""

import sys
from collections.abc import Callable

import click

from facadegen import (
    ConfigurationError,
    FacadegenError,
    ImageProcessingError,
    PromptBlockedError,
    ValidationError,
)
from facadegen.cli import progress
from facadegen.cli.utils import (
    EXIT_API_OR_GENERATION,
    EXIT_PROMPT_BLOCKED,
    EXIT_VALIDATION_OR_CONFIG,
)

_BLOCKED_MESSAGE = (
    "The request was blocked by the service's safety filter. "
    "Remove brand names, trademarks or people from the prompt and try again."
)


def map_exception_to_exit(exc: BaseException) -> tuple[int, str]:
    """Map library and known exceptions to (exit_code, user_message)."""
    if isinstance(exc, ValidationError):
        msg = exc.args[0] if exc.args else "Validation failed."
        if getattr(exc, "field", None):
            msg = f"{msg} (field: {exc.field})"
        return (EXIT_VALIDATION_OR_CONFIG, msg)
    if isinstance(exc, ConfigurationError):
        return (EXIT_VALIDATION_OR_CONFIG, exc.args[0] if exc.args else "Invalid configuration.")
    if isinstance(exc, ImageProcessingError):
        return (EXIT_VALIDATION_OR_CONFIG, exc.args[0] if exc.args else "Image processing failed.")
    if isinstance(exc, FileNotFoundError):
        return (EXIT_VALIDATION_OR_CONFIG, str(exc))
    if isinstance(exc, PromptBlockedError):
        return (EXIT_PROMPT_BLOCKED, _BLOCKED_MESSAGE)
    if isinstance(exc, FacadegenError):
        return (EXIT_API_OR_GENERATION, exc.args[0] if exc.args else "An error occurred.")
    return (EXIT_API_OR_GENERATION, str(exc) if exc.args else "An unexpected error occurred.")


def run_with_error_handling(
    fn: Callable[[], None],
    *,
    quiet: bool = False,
) -> None:
    """Run fn(); on exception print the mapped message and sys.exit with its code."""
    try:
        fn()
    except Exception as e:
        code, msg = map_exception_to_exit(e)
        if quiet:
            click.echo(msg, err=True)
        else:
            progress.print_error(msg)
        sys.exit(code)


__all__ = [
    "map_exception_to_exit",
    "run_with_error_handling",
]
