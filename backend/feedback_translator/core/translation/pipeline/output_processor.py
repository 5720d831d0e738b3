"""Output processor for model responses.

Turns raw model text into typed stage outputs or raises ValidationError.
Nothing here retries or coerces: a payload either matches the schema
exactly or is rejected.
"""

from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from feedback_translator.core.errors import ValidationError

from ..models.plan import InterpretationPlan
from ..models.result import CodeGeneration, FeedbackPattern, TranslationResult

ModelT = TypeVar("ModelT", bound=BaseModel)

# Problems listed in an error message before truncating
MAX_REPORTED_PROBLEMS = 5


class OutputProcessor:
    """Validates raw model output against the stage schemas."""

    def parse_interpretation(self, raw_text: str) -> InterpretationPlan:
        """Parse stage 1 output."""
        return self._parse(raw_text, InterpretationPlan, stage="interpretation")

    def parse_code_generation(self, raw_text: str) -> CodeGeneration:
        """Parse stage 2 output."""
        return self._parse(raw_text, CodeGeneration, stage="code_generation")

    def parse_pattern(self, raw_text: str) -> FeedbackPattern:
        """Parse pattern extraction output."""
        return self._parse(raw_text, FeedbackPattern, stage="pattern")

    def validate_result(self, payload: Dict[str, Any]) -> TranslationResult:
        """Validate the assembled result once more against the full schema."""
        try:
            return TranslationResult.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Assembled result failed validation: {self._summarize(e)}",
                stage="assembly",
            ) from e

    def _parse(self, raw_text: str, schema: Type[ModelT], stage: str) -> ModelT:
        content = self._strip_code_fence(raw_text or "")
        try:
            return schema.model_validate_json(content)
        except PydanticValidationError as e:
            if any(err["type"] == "json_invalid" for err in e.errors()):
                raise ValidationError(
                    f"{stage} response is not valid JSON", stage=stage
                ) from e
            raise ValidationError(
                f"{stage} response does not match schema: {self._summarize(e)}",
                stage=stage,
            ) from e

    def _strip_code_fence(self, content: str) -> str:
        """Remove a surrounding markdown code fence, if any.

        Some providers wrap JSON-mode output in ```json ... ``` even when
        asked not to; the payload inside must still be valid JSON.
        """
        content = content.strip()
        if content.startswith("```"):
            # Drop the opening fence line, language tag included
            newline = content.find("\n")
            content = content[newline + 1 :] if newline != -1 else content[3:]
            content = content.rstrip()
            if content.endswith("```"):
                content = content[:-3]
        return content.strip()

    def _summarize(self, error: PydanticValidationError) -> str:
        problems = []
        for err in error.errors()[:MAX_REPORTED_PROBLEMS]:
            location = ".".join(str(part) for part in err["loc"]) or "<root>"
            problems.append(f"{location}: {err['msg']}")
        if error.error_count() > MAX_REPORTED_PROBLEMS:
            problems.append(f"... {error.error_count() - MAX_REPORTED_PROBLEMS} more")
        return "; ".join(problems)
