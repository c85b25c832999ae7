"""
Command-line interface for facadegen.

Commands are defined with Click in facadegen.cli.commands and use only the
public API (from facadegen import ...).
"""

from facadegen.cli.commands import cli, main

__all__ = ["cli", "main"]
