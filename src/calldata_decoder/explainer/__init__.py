"""Gated plain-language explanations."""

from .gate import ExplainerPrompt, PromptSafety, build_prompt, describe_parameter, validate_prompt_safety
from .narrator import Narration, Narrator, format_fixed_response

__all__ = [
    "ExplainerPrompt",
    "Narration",
    "Narrator",
    "PromptSafety",
    "build_prompt",
    "describe_parameter",
    "format_fixed_response",
    "validate_prompt_safety",
]
