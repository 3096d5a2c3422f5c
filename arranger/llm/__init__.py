"""LLM integration for delegated layout decisions."""

from arranger.llm.client import LLMClient, LLMConfig
from arranger.llm.prompts import LAYOUT_DECISION_PROMPT, LAYOUT_SYSTEM_PROMPT

__all__ = [
    "LLMClient",
    "LLMConfig",
    "LAYOUT_DECISION_PROMPT",
    "LAYOUT_SYSTEM_PROMPT",
]
