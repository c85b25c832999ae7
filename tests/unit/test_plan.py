"""Unit tests for technical plan parsing."""

import pytest

from facadegen.core.plan import extract_plan_payload, parse_technical_plan
from facadegen.utils.exceptions import InvalidPlanFormatError

_ITEM = '{"item": "Main sign", "material": "ACM", "dimensions": "4.5m x 1.2m", "details": "Lit"}'


@pytest.mark.unit
class TestExtractPlanPayload:
    def test_fenced_json(self):
        assert extract_plan_payload("```json\n[1]\n```") == "[1]"

    def test_fence_without_language_tag(self):
        assert extract_plan_payload("```\n[2]\n```") == "[2]"

    def test_language_tag_case_insensitive(self):
        assert extract_plan_payload("```JSON\n[3]\n```") == "[3]"

    def test_no_fence_uses_whole_text(self):
        assert extract_plan_payload("  [4]  \n") == "[4]"

    def test_first_fence_used(self):
        assert extract_plan_payload("```json\n[5]\n```\ntext\n```json\n[6]\n```") == "[5]"

    def test_json_fence_preferred_over_earlier_untagged_fence(self):
        text = "Notes:\n```\nsee plan below\n```\n```json\n[8]\n```"
        assert extract_plan_payload(text) == "[8]"

    def test_other_language_fence_not_used(self):
        assert extract_plan_payload("```python\nx = 1\n```") == "```python\nx = 1\n```"

    def test_surrounding_prose_ignored(self):
        assert extract_plan_payload("Here is the plan:\n```json\n[7]\n```\nThanks") == "[7]"


@pytest.mark.unit
class TestParseTechnicalPlan:
    def test_fenced_plan(self):
        plan = parse_technical_plan(f"```json\n[{_ITEM}]\n```")
        assert len(plan) == 1
        assert plan[0].item == "Main sign"
        assert plan[0].dimensions == "4.5m x 1.2m"

    def test_bare_plan(self):
        plan = parse_technical_plan(f"[{_ITEM}, {_ITEM}]")
        assert [p.material for p in plan] == ["ACM", "ACM"]

    def test_plan_after_untagged_note_block(self):
        plan = parse_technical_plan(f"Notes:\n```\nsee plan below\n```\n```json\n[{_ITEM}]\n```")
        assert [p.item for p in plan] == ["Main sign"]

    def test_empty_array(self):
        assert parse_technical_plan("```json\n[]\n```") == []

    def test_invalid_json(self):
        with pytest.raises(InvalidPlanFormatError) as exc_info:
            parse_technical_plan("not json")
        assert str(exc_info.value) == "AI returned an invalid technical plan format."
        assert exc_info.value.raw_text == "not json"

    def test_object_instead_of_array(self):
        with pytest.raises(InvalidPlanFormatError) as exc_info:
            parse_technical_plan(f"```json\n{_ITEM}\n```")
        assert "not an array" in str(exc_info.value)

    def test_non_object_element(self):
        with pytest.raises(InvalidPlanFormatError):
            parse_technical_plan('["a sign"]')

    def test_element_missing_field(self):
        with pytest.raises(InvalidPlanFormatError) as exc_info:
            parse_technical_plan('[{"item": "a", "material": "b", "dimensions": "c"}]')
        assert "details" in str(exc_info.value)

    def test_element_with_non_string_field(self):
        with pytest.raises(InvalidPlanFormatError):
            parse_technical_plan(
                '[{"item": "a", "material": "b", "dimensions": 3, "details": "d"}]'
            )
