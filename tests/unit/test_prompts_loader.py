"""Unit tests for prompts_loader (YAML-loaded instruction templates)."""

from unittest.mock import patch

import pytest
import yaml

import facadegen.core.prompts_loader as prompts_loader
from facadegen.core.prompts_loader import (
    REQUIRED_TEMPLATES,
    PromptTemplate,
    _load_templates,
    get_system_instruction,
    get_template,
    render_prompt,
)
from facadegen.utils.exceptions import ConfigurationError


def _valid_entries() -> dict:
    entry = {"template": "x {prompt}", "placeholders": ["prompt"]}
    return {key: dict(entry) for key in REQUIRED_TEMPLATES}


@pytest.mark.unit
class TestBundledPrompts:
    def test_all_required_templates_present(self):
        for key in REQUIRED_TEMPLATES:
            assert get_template(key).template

    def test_redesign_embeds_prompt_and_asks_for_json(self):
        text = render_prompt("redesign", prompt="Modern matte black sign")
        assert "Modern matte black sign" in text
        assert "```json" in text
        for key in ("item", "material", "dimensions", "details"):
            assert f'"{key}"' in text

    def test_redesign_has_safety_filter(self):
        text = render_prompt("redesign", prompt="x").lower()
        assert "logos" in text
        assert "faces" in text

    def test_enhance_template_and_system_instruction(self):
        expected = 'Enhance this user request: "blue sign"'
        assert render_prompt("enhance", prompt="blue sign") == expected
        instruction = get_system_instruction("enhance")
        assert "English" in instruction

    def test_placement_embeds_phrase(self):
        assert '"on the window"' in render_prompt("placement", placement="on the window")

    def test_logo_mentions_transparent_background(self):
        assert "transparent background" in render_prompt("logo", prompt="bakery")

    def test_reinvent_logo_names_company(self):
        assert '"Acme"' in render_prompt("reinvent_logo", company_name="Acme")

    def test_pattern_embeds_theme(self):
        text = render_prompt("pattern", prompt="coffee beans")
        assert "seamless" in text
        assert '"coffee beans"' in text

    def test_pdf_cover_forbids_text_and_sets_aspect(self):
        text = render_prompt("pdf_cover", prompt="warm wood")
        assert "NOT" in text
        assert "16:9" in text

    def test_render_rejects_wrong_placeholders(self):
        with pytest.raises(ConfigurationError):
            render_prompt("logo", description="x")

    def test_render_unknown_template(self):
        with pytest.raises(ConfigurationError):
            render_prompt("nonexistent", prompt="x")

    def test_system_instruction_missing(self):
        with pytest.raises(ConfigurationError):
            get_system_instruction("logo")


@pytest.mark.unit
class TestPromptTemplateSchema:
    def test_placeholder_mismatch_rejected(self):
        with pytest.raises(ValueError):
            PromptTemplate(template="hello {name}", placeholders=["other"])

    def test_escaped_braces_are_not_placeholders(self):
        entry = PromptTemplate(template="json {{ }} {prompt}", placeholders=["prompt"])
        assert entry.placeholders == ["prompt"]

    def test_extra_text(self):
        entry = PromptTemplate(template="a", system_instruction="be brief")
        assert entry.extra_text("system_instruction") == "be brief"
        assert entry.extra_text("missing") is None


@pytest.mark.unit
class TestYAMLValidation:
    """Loader error handling with a patched prompts.yaml."""

    @pytest.fixture(autouse=True)
    def clear_cache(self, monkeypatch):
        monkeypatch.setattr(prompts_loader, "_templates", None)

    def _patch_yaml(self, text: str):
        patcher = patch("importlib.resources.files")
        mock_files = patcher.start()
        mock_files.return_value.joinpath.return_value.read_text.return_value = text
        return patcher

    def test_valid_yaml_loads(self):
        patcher = self._patch_yaml(yaml.dump(_valid_entries()))
        try:
            templates = _load_templates()
        finally:
            patcher.stop()
        assert set(REQUIRED_TEMPLATES) <= set(templates)

    def test_malformed_yaml_raises(self):
        patcher = self._patch_yaml("redesign:\n  template: |\n    foo\n  bar:\nbad indentation")
        try:
            with pytest.raises(ConfigurationError) as exc_info:
                _load_templates()
        finally:
            patcher.stop()
        assert "Failed to parse prompts.yaml" in str(exc_info.value)

    def test_empty_yaml_raises(self):
        patcher = self._patch_yaml("")
        try:
            with pytest.raises(ConfigurationError) as exc_info:
                _load_templates()
        finally:
            patcher.stop()
        assert "mapping" in str(exc_info.value)

    def test_missing_templates_listed(self):
        entries = _valid_entries()
        del entries["pattern"]
        patcher = self._patch_yaml(yaml.dump(entries))
        try:
            with pytest.raises(ConfigurationError) as exc_info:
                _load_templates()
        finally:
            patcher.stop()
        assert "pattern" in str(exc_info.value)

    def test_invalid_entry_raises(self):
        entries = _valid_entries()
        entries["logo"] = {"template": "x {prompt}", "placeholders": []}
        patcher = self._patch_yaml(yaml.dump(entries))
        try:
            with pytest.raises(ConfigurationError) as exc_info:
                _load_templates()
        finally:
            patcher.stop()
        assert "'logo'" in str(exc_info.value)

    def test_file_not_found_raises(self):
        with patch("importlib.resources.files") as mock_files:
            mock_files.return_value.joinpath.return_value.read_text.side_effect = FileNotFoundError
            with pytest.raises(ConfigurationError) as exc_info:
                _load_templates()
        assert "prompts.yaml not found" in str(exc_info.value)

    def test_caching_prevents_reload(self):
        first = _load_templates()
        with patch("importlib.resources.files") as mock_files:
            second = _load_templates()
            mock_files.assert_not_called()
        assert first is second
