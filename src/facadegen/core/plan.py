"""
Technical plan parsing.

The service returns the plan as text, usually wrapped in a fenced ```json block.
Parsing is two steps: locate the fenced payload (or take the whole text), then
decode JSON and validate that it is an array of plan items.
"""

import json
import re

from pydantic import ValidationError as PydanticValidationError

from facadegen.core.models import TechnicalPlanItem
from facadegen.logging_config import get_logger
from facadegen.utils.exceptions import InvalidPlanFormatError

logger = get_logger(__name__)

_JSON_FENCE_RE = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)
_FENCE_RE = re.compile(r"```[ \t]*\n(.*?)```", re.DOTALL)


def extract_plan_payload(text: str) -> str:
    """
    Return the JSON text of a plan response.

    The first block tagged ``json`` wins. Without one, the first untagged fenced
    block is used, then the whole text. Surrounding whitespace is stripped.
    """
    match = _JSON_FENCE_RE.search(text) or _FENCE_RE.search(text)
    payload = match.group(1) if match else text
    return payload.strip()


def parse_technical_plan(text: str) -> list[TechnicalPlanItem]:
    """
    Parse plan text into a list of TechnicalPlanItem.

    Args:
        text: Raw text part from the service

    Returns:
        Plan items in response order (may be empty)

    Raises:
        InvalidPlanFormatError: If the payload is not JSON, not an array, or an
            element lacks one of item/material/dimensions/details as a string
    """
    payload = extract_plan_payload(text)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse technical plan JSON: %s. Raw text: %s", e, text)
        raise InvalidPlanFormatError(
            "AI returned an invalid technical plan format.", raw_text=text
        ) from e

    if not isinstance(data, list):
        logger.error("Technical plan is %s, not an array. Raw text: %s", type(data).__name__, text)
        raise InvalidPlanFormatError("Parsed technical plan is not an array.", raw_text=text)

    items: list[TechnicalPlanItem] = []
    for index, raw in enumerate(data):
        if not isinstance(raw, dict):
            raise InvalidPlanFormatError(
                f"Technical plan element {index} is not an object.", raw_text=text
            )
        try:
            items.append(TechnicalPlanItem.model_validate(raw))
        except PydanticValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
            logger.error(
                "Invalid technical plan element %d (%s). Raw text: %s", index, fields, text
            )
            raise InvalidPlanFormatError(
                f"Technical plan element {index} has invalid fields: {fields}", raw_text=text
            ) from e
    return items
