"""LLM gateway: the single point where model calls leave the process.

The gateway issues exactly one request per call and never retries;
retrying is composed around it by the translation pipeline.
"""

import logging
import time
from abc import ABC, abstractmethod

from litellm import acompletion

from feedback_translator.core.translation.models.prompt import PromptBundle
from feedback_translator.core.translation.models.response import LLMResponse, TokenUsage

from .runtime_config import LLMRuntimeConfig

logger = logging.getLogger(__name__)


class LLMGateway(ABC):
    """Abstract gateway for LLM providers."""

    @property
    @abstractmethod
    def provider(self) -> str:
        """Get provider name."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Get model identifier."""

    @abstractmethod
    async def call(self, bundle: PromptBundle) -> LLMResponse:
        """Make one LLM call.

        Args:
            bundle: Prompt bundle with messages and configuration

        Returns:
            LLMResponse with content and metadata

        Raises:
            Exception: Any transport or provider error, unchanged
        """

    async def call_model(self, prompt: str) -> str:
        """Send a single prompt in JSON response mode and return the raw text."""
        response = await self.call(PromptBundle.from_prompt(prompt))
        return response.content

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the provider is available."""


class LiteLLMGateway(LLMGateway):
    """Gateway for all providers using LiteLLM."""

    def __init__(self, config: LLMRuntimeConfig):
        self.config = config
        logger.info(
            f"[LLM Gateway] Initialized: provider={config.provider}, model={config.model}, "
            f"litellm_model={config.get_litellm_model()}, base_url={config.base_url}"
        )

    @property
    def provider(self) -> str:
        return self.config.provider

    @property
    def model(self) -> str:
        return self.config.model

    async def call(self, bundle: PromptBundle) -> LLMResponse:
        """Make LLM API call using LiteLLM."""
        start_time = time.time()

        kwargs = self.config.to_litellm_kwargs()
        kwargs["messages"] = bundle.to_openai_format()

        # Ask the backend to constrain output to JSON where it supports it
        if bundle.response_format:
            kwargs["response_format"] = bundle.response_format

        prompt_chars = sum(len(m.content) for m in bundle.messages)
        logger.info(
            f"LLM call: model={kwargs['model']}, provider={self.provider}, "
            f"prompt_chars={prompt_chars}"
        )

        try:
            response = await acompletion(**kwargs)
        except Exception as e:
            logger.error(f"LLM call failed: model={kwargs['model']}, error={e}")
            raise

        result = LLMResponse(
            content=response.choices[0].message.content or "",
            provider=self.provider,
            model=self.model,
            usage=TokenUsage(
                prompt_tokens=response.usage.prompt_tokens if response.usage else 0,
                completion_tokens=response.usage.completion_tokens if response.usage else 0,
                total_tokens=response.usage.total_tokens if response.usage else 0,
            ),
            latency_ms=int((time.time() - start_time) * 1000),
        )

        logger.info(
            f"LLM response: tokens={result.usage.total_tokens}, latency={result.latency_ms}ms"
        )
        return result

    async def health_check(self) -> bool:
        """Check LLM API availability."""
        kwargs = self.config.to_litellm_kwargs()
        kwargs["messages"] = [{"role": "user", "content": "Hi"}]
        kwargs["max_tokens"] = 5
        try:
            await acompletion(**kwargs)
            return True
        except Exception as e:
            logger.warning(f"Health check failed for {self.model}: {e}")
            return False
