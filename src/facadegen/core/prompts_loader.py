"""
Load instruction templates from the bundled prompts.yaml file.

Templates are parsed and validated once per process. Each entry declares the
placeholders its template uses; render_prompt() fills them in.
"""

import importlib.resources
import string
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from facadegen.utils.exceptions import ConfigurationError

# Keys the client renders; all must be present in prompts.yaml
REQUIRED_TEMPLATES = (
    "redesign",
    "enhance",
    "placement",
    "logo",
    "reinvent_logo",
    "pattern",
    "pdf_cover",
)

_templates: dict[str, "PromptTemplate"] | None = None


class PromptTemplate(BaseModel):
    """Schema for one prompts.yaml entry."""

    model_config = {"extra": "allow"}  # extra string fields, e.g. system_instruction

    template: str = Field(..., min_length=1)
    placeholders: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _placeholders_match(self) -> "PromptTemplate":
        used = {name for _, name, _, _ in string.Formatter().parse(self.template) if name}
        declared = set(self.placeholders)
        if used != declared:
            raise ValueError(
                f"template uses {sorted(used)} but declares {sorted(declared)}"
            )
        return self

    def extra_text(self, key: str) -> str | None:
        """Return an additional string field such as system_instruction."""
        value = (self.model_extra or {}).get(key)
        return value if isinstance(value, str) else None


def _load_templates() -> dict[str, PromptTemplate]:
    """Load and validate prompts.yaml from the package. Cached after first call.

    Raises:
        ConfigurationError: If the file is missing, malformed, or fails validation.
    """
    global _templates
    if _templates is not None:
        return _templates

    try:
        raw = importlib.resources.files("facadegen").joinpath("prompts.yaml").read_text(
            encoding="utf-8"
        )
    except FileNotFoundError as e:
        raise ConfigurationError(
            "prompts.yaml not found. This file is required and should be bundled with the package."
        ) from e

    try:
        data: Any = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse prompts.yaml: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError("prompts.yaml must contain a mapping of template entries.")

    missing = [key for key in REQUIRED_TEMPLATES if key not in data]
    if missing:
        raise ConfigurationError(f"prompts.yaml is missing templates: {', '.join(missing)}")

    templates: dict[str, PromptTemplate] = {}
    for key, entry in data.items():
        if not isinstance(entry, dict):
            raise ConfigurationError(f"prompts.yaml entry {key!r} must be a mapping.")
        try:
            templates[key] = PromptTemplate(**entry)
        except PydanticValidationError as e:
            errors = "; ".join(err["msg"] for err in e.errors())
            raise ConfigurationError(f"Invalid prompts.yaml entry {key!r}: {errors}") from e

    _templates = templates
    return _templates


def get_template(key: str) -> PromptTemplate:
    """
    Return the validated template entry for key.

    Raises:
        ConfigurationError: If key is not defined in prompts.yaml
    """
    templates = _load_templates()
    if key not in templates:
        raise ConfigurationError(f"Template {key!r} not found in prompts.yaml.")
    return templates[key]


def render_prompt(key: str, **values: str) -> str:
    """
    Fill a template's placeholders.

    Raises:
        ConfigurationError: If the template is unknown or values do not match its placeholders
    """
    entry = get_template(key)
    expected = set(entry.placeholders)
    if set(values) != expected:
        raise ConfigurationError(
            f"Template {key!r} expects {sorted(expected)}, got {sorted(values)}."
        )
    return entry.template.format(**values).strip()


def get_system_instruction(key: str) -> str:
    """
    Return the system_instruction text stored alongside a template.

    Raises:
        ConfigurationError: If the entry has no system_instruction
    """
    text = get_template(key).extra_text("system_instruction")
    if not text:
        raise ConfigurationError(f"Template {key!r} has no system_instruction in prompts.yaml.")
    return text.strip()
