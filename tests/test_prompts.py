"""
Unit tests for prompt and persona template loading.

Tests ensure templates are loaded correctly and formatted properly.
"""
import pytest

from autofi_agents.utils.prompts import get_prompt, load_personas, load_prompts


class TestPromptLoading:
    """Test prompt loading from templates/prompts.yaml."""

    def test_load_prompts_returns_dict(self):
        """Test that load_prompts returns a dictionary."""
        prompts = load_prompts()
        assert isinstance(prompts, dict)
        assert len(prompts) > 0

    def test_load_prompts_cached(self):
        """Test that load_prompts uses caching."""
        assert load_prompts() is load_prompts()

    def test_required_prompts_exist(self):
        """Test that the sections agents append to prompts exist."""
        prompts = load_prompts()
        for prompt_name in ["context_section", "objectives_section"]:
            assert prompt_name in prompts, f"Missing required prompt: {prompt_name}"

    def test_prompts_are_strings(self):
        for name, template in load_prompts().items():
            assert isinstance(template, str), f"Prompt '{name}' is not a string"


class TestPersonaLoading:
    """Test the persona table in templates/personas.yaml."""

    def test_every_type_has_preamble_and_objectives(self):
        personas = load_personas()
        for agent_type in ["treasury", "defi", "nft", "governance", "donation"]:
            entry = personas[agent_type]
            assert entry["prompt_preamble"]
            assert len(entry["objectives"]) > 0

    def test_load_personas_cached(self):
        assert load_personas() is load_personas()


class TestGetPrompt:
    """Test get_prompt function."""

    def test_context_section(self):
        prompt = get_prompt("context_section", context='{"wallet": "0xabc"}')
        assert prompt == 'Context: {"wallet": "0xabc"}'

    def test_objectives_section(self):
        prompt = get_prompt("objectives_section", objectives="1. Stay safe\n2. Earn yield")
        assert prompt.startswith("Objectives:")
        assert "1. Stay safe\n2. Earn yield" in prompt

    def test_get_prompt_invalid_name(self):
        """Test that invalid prompt name raises ValueError."""
        with pytest.raises(ValueError) as exc_info:
            get_prompt("nonexistent_prompt", context="x")

        assert "not found" in str(exc_info.value).lower()
        assert "nonexistent_prompt" in str(exc_info.value)

    def test_get_prompt_missing_variable(self):
        """Test that missing template variable raises KeyError."""
        with pytest.raises(KeyError) as exc_info:
            get_prompt("context_section")

        assert "context" in str(exc_info.value).lower()
