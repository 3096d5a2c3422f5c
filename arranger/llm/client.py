"""LLM API client for layout decisions."""

import logging
import os
from dataclasses import dataclass
from typing import Literal

logger = logging.getLogger(__name__)


@dataclass
class LLMConfig:
    """Configuration for LLM client."""

    provider: Literal["anthropic", "openai"] = "anthropic"
    model: str = "claude-3-5-haiku-20241022"
    max_tokens: int = 2048
    temperature: float = 0.2
    timeout: float = 60.0


class LLMClient:
    """Async client for interacting with LLM APIs.

    Supports Anthropic Claude and OpenAI GPT models. Its only job in this
    project is to answer a layout prompt with text; parsing and validating
    that text belongs to the caller.
    """

    def __init__(self, config: LLMConfig | None = None):
        """Initialize LLM client.

        Args:
            config: LLM configuration.
        """
        self.config = config or LLMConfig()
        self._client = None

    @property
    def client(self):
        """Lazy-load the API client."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _create_client(self):
        """Create the appropriate async API client."""
        if self.config.provider == "anthropic":
            try:
                from anthropic import AsyncAnthropic
            except ImportError:
                raise ImportError("anthropic package not installed. Run: pip install anthropic")
            api_key = os.getenv("ANTHROPIC_API_KEY")
            if not api_key:
                raise ValueError("ANTHROPIC_API_KEY not set")
            return AsyncAnthropic(api_key=api_key, timeout=self.config.timeout)

        elif self.config.provider == "openai":
            try:
                from openai import AsyncOpenAI
            except ImportError:
                raise ImportError("openai package not installed. Run: pip install openai")
            api_key = os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise ValueError("OPENAI_API_KEY not set")
            return AsyncOpenAI(api_key=api_key, timeout=self.config.timeout)

        raise ValueError(f"Unknown provider: {self.config.provider}")

    async def decide(self, system_prompt: str, prompt: str) -> str:
        """Ask the model for a layout decision.

        Args:
            system_prompt: System/instruction prompt.
            prompt: Layout description.

        Returns:
            Model response text (unparsed).
        """
        if self.config.provider == "anthropic":
            response = await self.client.messages.create(
                model=self.config.model,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                system=system_prompt,
                messages=[
                    {"role": "user", "content": prompt}
                ],
            )
            text = "".join(
                block.text for block in response.content if getattr(block, "type", "") == "text"
            )

        elif self.config.provider == "openai":
            response = await self.client.chat.completions.create(
                model=self.config.model,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
            )
            text = response.choices[0].message.content or ""

        else:
            raise ValueError(f"Unknown provider: {self.config.provider}")

        logger.debug(f"LLM response ({len(text)} chars): {text[:500]}")
        return text

    def is_available(self) -> bool:
        """Check if LLM client is available.

        Returns:
            True if API key is set and client can be created.
        """
        try:
            _ = self.client
            return True
        except (ImportError, ValueError):
            return False
