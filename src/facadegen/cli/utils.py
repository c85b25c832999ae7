"""
Utility functions for the CLI.

Exit code constants and output path helpers shared by the commands.
"""

from datetime import datetime
from pathlib import Path

# Exit codes
EXIT_API_OR_GENERATION = 1
EXIT_VALIDATION_OR_CONFIG = 2
EXIT_PROMPT_BLOCKED = 3


def default_output_path(kind: str, ext: str) -> Path:
    """Return facadegen_<kind>_<YYYYMMDD>_<HHMMSS>.<ext> in the current directory."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return Path(f"facadegen_{kind}_{timestamp}.{ext or 'png'}")


def plan_path_for(image_path: Path) -> Path:
    """Technical plan JSON path stored next to a redesign image."""
    return image_path.with_name(f"{image_path.stem}_plan.json")


__all__ = [
    "EXIT_API_OR_GENERATION",
    "EXIT_VALIDATION_OR_CONFIG",
    "EXIT_PROMPT_BLOCKED",
    "default_output_path",
    "plan_path_for",
]
