"""Prompt pipelines for NPC turns."""

from .prompt_builder import NpcPromptBuilder  # noqa: F401
