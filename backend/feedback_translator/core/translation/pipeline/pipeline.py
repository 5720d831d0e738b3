"""Two-stage feedback translation pipeline.

Coordinates the flow:
Input -> PromptEngine -> LLMGateway (with retries) -> OutputProcessor
      -> InterpretationPlan -> PromptEngine -> LLMGateway -> OutputProcessor
      -> TranslationResult

Stage 1 decides what the client wants; stage 2 turns that plan into
before/after edits without ever seeing the raw feedback.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from feedback_translator.config import Settings
from feedback_translator.core.errors import (
    InvalidInputError,
    ModelUnavailableError,
    TranslationError,
    ValidationError,
)
from feedback_translator.core.llm.gateway import LLMGateway
from feedback_translator.utils.text import safe_truncate

from ..models.plan import InterpretationPlan
from ..models.result import TranslationResult
from .output_processor import OutputProcessor
from .prompt_engine import PromptEngine
from .retry import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_MAX_JITTER_MS,
    DEFAULT_MAX_RETRIES,
    retry_with_backoff,
)

logger = logging.getLogger(__name__)

FALLBACK_PATTERN = "General feedback"
PATTERN_FEEDBACK_MAX_CHARS = 500


class TranslationInput(BaseModel):
    """Preconditions for a translation run."""

    component_name: str = Field(..., min_length=1, max_length=100)
    source_text: str = Field(..., min_length=10, max_length=50_000)
    feedback_text: str = Field(..., min_length=5, max_length=1000)


class PatternInput(BaseModel):
    """Preconditions for pattern extraction."""

    feedback_text: str = Field(..., min_length=3, max_length=PATTERN_FEEDBACK_MAX_CHARS)


@dataclass
class PipelineConfig:
    """Retry configuration for model calls."""

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS
    max_jitter_ms: int = DEFAULT_MAX_JITTER_MS

    @classmethod
    def from_settings(cls, settings: Settings) -> "PipelineConfig":
        return cls(
            max_retries=settings.max_retries,
            base_delay_ms=settings.retry_base_delay_ms,
            max_jitter_ms=settings.retry_max_jitter_ms,
        )


class TranslationPipeline:
    """Main orchestrator for feedback translation."""

    def __init__(
        self,
        gateway: LLMGateway,
        config: Optional[PipelineConfig] = None,
        output_processor: Optional[OutputProcessor] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """Initialize translation pipeline.

        Args:
            gateway: Model gateway, shared for the process lifetime
            config: Retry configuration
            output_processor: Response validator
            sleep: Wait coroutine for retries (tests pass a no-op)
        """
        self.gateway = gateway
        self.config = config or PipelineConfig()
        self.output_processor = output_processor or OutputProcessor()
        self._sleep = sleep

    async def translate_feedback(
        self,
        component_name: str,
        source_text: str,
        feedback_text: str,
    ) -> TranslationResult:
        """Translate client feedback into validated code changes.

        Raises:
            InvalidInputError: If inputs fail precondition checks
            TranslationError: If either stage fails; ``cause`` holds the
                ModelUnavailableError or ValidationError
        """
        params = self._validate_input(
            TranslationInput,
            component_name=component_name,
            source_text=source_text,
            feedback_text=feedback_text,
        )

        try:
            plan = await self._interpret(params)
            generation = await self._generate_code(params.source_text, plan)

            logger.info("Assembling translation result")
            return self.output_processor.validate_result(
                {
                    "interpretation": plan.interpretation,
                    "actionable_changes": generation.actionable_changes,
                    "external_dependencies_noted": generation.external_dependencies_noted,
                    "parent_component_changes_noted": generation.parent_component_changes_noted,
                    "confidence": plan.confidence,
                    "reasoning": plan.reasoning,
                }
            )
        except (ModelUnavailableError, ValidationError) as e:
            logger.error(f"Translation failed for {params.component_name}: {e}")
            raise TranslationError(
                f"Failed to get a valid response from the model. Details: {e}",
                cause=e,
            ) from e

    async def _interpret(self, params: TranslationInput) -> InterpretationPlan:
        prompt = PromptEngine.build_interpretation_prompt(
            params.component_name, params.source_text, params.feedback_text
        )
        logger.info(f"Stage 1: interpretation prompt built ({len(prompt)} chars)")

        raw = await self._call_with_retry(prompt)
        logger.debug(f"Stage 1: raw response {safe_truncate(raw, 200)}")

        plan = self.output_processor.parse_interpretation(raw)
        logger.info(
            f"Stage 1 complete: confidence={plan.confidence}, "
            f"planned_changes={len(plan.change_plan)}"
        )
        return plan

    async def _generate_code(self, source_text: str, plan: InterpretationPlan):
        prompt = PromptEngine.build_code_generation_prompt(source_text, plan.change_plan)
        logger.info(f"Stage 2: code generation prompt built ({len(prompt)} chars)")

        raw = await self._call_with_retry(prompt)
        logger.debug(f"Stage 2: raw response {safe_truncate(raw, 200)}")

        generation = self.output_processor.parse_code_generation(raw)
        logger.info(
            f"Stage 2 complete: actionable_changes={len(generation.actionable_changes)}"
        )
        return generation

    async def extract_pattern(self, feedback_text: str) -> str:
        """Condense feedback into a short pattern phrase.

        Best effort: any model or validation failure yields FALLBACK_PATTERN.

        Raises:
            InvalidInputError: If the feedback is out of bounds
        """
        params = self._validate_input(PatternInput, feedback_text=feedback_text)
        prompt = PromptEngine.build_pattern_prompt(params.feedback_text)

        try:
            raw = await self._call_with_retry(prompt)
            pattern = self.output_processor.parse_pattern(raw)
        except (ModelUnavailableError, ValidationError) as e:
            logger.warning(f"Pattern extraction failed, using fallback: {e}")
            return FALLBACK_PATTERN

        logger.info(f"Extracted pattern '{pattern.pattern}' ({pattern.category.value})")
        return pattern.pattern

    async def health_check(self) -> bool:
        """Check if the model backend is available."""
        return await self.gateway.health_check()

    async def _call_with_retry(self, prompt: str) -> str:
        kwargs = {"max_jitter_ms": self.config.max_jitter_ms}
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return await retry_with_backoff(
            lambda: self.gateway.call_model(prompt),
            self.config.max_retries,
            self.config.base_delay_ms,
            **kwargs,
        )

    @staticmethod
    def _validate_input(schema, **values):
        try:
            return schema(**values)
        except PydanticValidationError as e:
            problems = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise InvalidInputError(
                f"Invalid input: {'; '.join(problems)}", problems=problems
            ) from e
