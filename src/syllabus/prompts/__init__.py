"""Instruction templates for the structured-generation service."""

from syllabus.prompts.registry import clear_cache, get_prompt, list_prompts

__all__ = ["clear_cache", "get_prompt", "list_prompts"]
