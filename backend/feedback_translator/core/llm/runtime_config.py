"""LLM runtime configuration.

Single source of truth for the parameters that reach the model call.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from feedback_translator.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class LLMRuntimeConfig:
    """Complete LLM configuration for one gateway."""

    # Connection parameters
    provider: str
    model: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None

    # Generation parameters
    temperature: float = 0.2
    max_tokens: int = 8192

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMRuntimeConfig":
        """Build the config from application settings."""
        api_key = settings.get_api_key()
        if not api_key:
            logger.warning(
                "No API key configured for provider %s; relying on LiteLLM environment lookup",
                settings.llm_provider,
            )
        return cls(
            provider=settings.llm_provider,
            model=settings.llm_model,
            api_key=api_key,
            base_url=settings.llm_base_url,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        )

    def get_litellm_model(self) -> str:
        """Get model string in LiteLLM format (provider/model)."""
        if self.provider == "openai" or "/" in self.model:
            return self.model
        return f"{self.provider}/{self.model}"

    def to_litellm_kwargs(self) -> Dict[str, Any]:
        """Convert to kwargs for litellm.acompletion()."""
        kwargs: Dict[str, Any] = {
            "model": self.get_litellm_model(),
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

        if self.api_key:
            kwargs["api_key"] = self.api_key

        if self.base_url:
            kwargs["api_base"] = self.base_url

        return kwargs
