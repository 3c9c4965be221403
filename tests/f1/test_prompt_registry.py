"""Tests for the prompt registry."""

import pytest

from syllabus.prompts.registry import (
    PROMPTS_DIR,
    clear_cache,
    get_prompt,
    list_prompts,
)


class TestGetPrompt:
    """Tests for get_prompt function."""

    def test_loads_extraction_templates(self):
        syllabus = get_prompt("extraction/syllabus")
        schedule = get_prompt("extraction/schedule")

        assert "syllabi" in syllabus
        assert "schedule" in schedule.lower()
        assert syllabus != schedule

    def test_substitutes_document_text(self):
        prompt = get_prompt("extraction/syllabus", document_text="COURSE TEXT HERE")

        assert "COURSE TEXT HERE" in prompt
        assert "{document_text}" not in prompt

    def test_json_braces_untouched(self):
        prompt = get_prompt("extraction/schedule", document_text="x")

        assert '"week_number": number' in prompt
        assert "{" in prompt

    def test_missing_raises(self):
        with pytest.raises(FileNotFoundError):
            get_prompt("extraction/transcript")

    def test_cache_and_bypass(self):
        clear_cache()
        cached = get_prompt("extraction/syllabus")
        uncached = get_prompt("extraction/syllabus", use_cache=False)

        assert cached == uncached


class TestListPrompts:
    def test_lists_templates_sorted(self):
        prompts = list_prompts()

        assert prompts == sorted(prompts)
        assert "extraction/schedule" in prompts
        assert "extraction/syllabus" in prompts

    def test_prompts_dir_inside_package(self):
        assert PROMPTS_DIR.name == "templates"
        assert PROMPTS_DIR.exists()
