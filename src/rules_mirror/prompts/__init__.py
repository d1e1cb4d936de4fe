"""Prompt templates that embed rule content."""

from rules_mirror.prompts.builders import (
    PROMPTS,
    BuiltPrompt,
    PromptArgument,
    PromptBuilder,
    PromptDefinition,
    PromptError,
)

__all__ = [
    "BuiltPrompt",
    "PROMPTS",
    "PromptArgument",
    "PromptBuilder",
    "PromptDefinition",
    "PromptError",
]
