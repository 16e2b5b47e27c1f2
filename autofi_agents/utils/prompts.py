"""
Prompt loading utilities with caching.

This module provides efficient loading of the YAML templates shipped in
``autofi_agents/templates``: prompt sections and built-in personas.
Files are cached to avoid repeated reads.
"""
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict
import yaml

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"


def _load_yaml(filename: str) -> Dict[str, Any]:
    path = TEMPLATES_DIR / filename

    if not path.exists():
        raise FileNotFoundError(
            f"Template file not found at {path}. "
            f"Ensure templates/{filename} is packaged."
        )

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@lru_cache(maxsize=1)
def load_prompts() -> Dict[str, str]:
    """
    Load prompt sections from templates/prompts.yaml.

    Returns:
        Dict mapping prompt names to template strings

    Raises:
        FileNotFoundError: If prompts.yaml doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    return _load_yaml("prompts.yaml")


@lru_cache(maxsize=1)
def load_personas() -> Dict[str, Dict[str, Any]]:
    """Load the built-in persona table from templates/personas.yaml."""
    return _load_yaml("personas.yaml")


def get_prompt(name: str, **kwargs) -> str:
    """
    Get prompt by name and format with kwargs.

    Args:
        name: Prompt name (e.g., "context_section", "objectives_section")
        **kwargs: Variables to format into prompt template

    Returns:
        Formatted prompt string

    Raises:
        ValueError: If prompt name not found
        KeyError: If required template variable is missing

    Example:
        >>> get_prompt("context_section", context='{"wallet": "0xabc"}')
        'Context: {"wallet": "0xabc"}'
    """
    prompts = load_prompts()
    template = prompts.get(name)

    if not template:
        available = list(prompts.keys())
        raise ValueError(
            f"Prompt '{name}' not found in templates/prompts.yaml. "
            f"Available prompts: {available}"
        )

    try:
        return template.format(**kwargs)
    except KeyError as e:
        raise KeyError(
            f"Missing required variable {e} for prompt '{name}'. "
            f"Provided: {list(kwargs.keys())}"
        ) from e
