"""Prompt Registry - Load instruction templates from Markdown files.

Templates live next to this module under templates/, keyed by their
relative path without extension (e.g. "extraction/syllabus").

Usage:
    from syllabus.prompts.registry import get_prompt

    prompt = get_prompt("extraction/syllabus", document_text=text)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

PROMPTS_DIR = Path(__file__).parent / "templates"


def _get_prompt_uncached(key: str) -> str:
    """Load raw template from file without caching.

    Raises:
        FileNotFoundError: If template file doesn't exist
    """
    file_path = PROMPTS_DIR / f"{key}.md"
    if not file_path.exists():
        raise FileNotFoundError(f"Prompt not found: {key} (looked at {file_path})")

    return file_path.read_text(encoding="utf-8")


@lru_cache(maxsize=32)
def _get_cached_prompt(key: str) -> str:
    """Cached version of template loading."""
    return _get_prompt_uncached(key)


def get_prompt(key: str, use_cache: bool = True, **variables: str) -> str:
    """Load a template and substitute variables.

    Only the {name} placeholders passed as keyword arguments are replaced,
    so literal JSON braces in a template are left alone.

    Args:
        key: Path-like key, e.g., "extraction/schedule"
        use_cache: Whether to use cached version (default True)
        **variables: Values to substitute, e.g., document_text="..."

    Returns:
        Template string with variables substituted

    Raises:
        FileNotFoundError: If template file doesn't exist
    """
    if use_cache:
        content = _get_cached_prompt(key)
    else:
        content = _get_prompt_uncached(key)

    for var_name, var_value in variables.items():
        content = content.replace(f"{{{var_name}}}", str(var_value))

    return content


def list_prompts() -> list[str]:
    """List all available template keys, sorted."""
    if not PROMPTS_DIR.exists():
        logger.warning("prompts_dir_not_found", path=str(PROMPTS_DIR))
        return []

    prompts = []
    for path in PROMPTS_DIR.rglob("*.md"):
        key = path.relative_to(PROMPTS_DIR).with_suffix("").as_posix()
        prompts.append(key)
    return sorted(prompts)


def clear_cache() -> None:
    """Clear the template cache."""
    _get_cached_prompt.cache_clear()
