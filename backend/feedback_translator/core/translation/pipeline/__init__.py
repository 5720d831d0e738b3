"""Translation pipeline components.

This module provides the core pipeline components:
- PromptEngine: Builds stage prompts from sanitized inputs
- OutputProcessor: Validates raw model responses
- retry_with_backoff: Exponential backoff around model calls
- TranslationPipeline: Orchestrates the two-stage flow
"""

from .output_processor import OutputProcessor
from .pipeline import (
    FALLBACK_PATTERN,
    PATTERN_FEEDBACK_MAX_CHARS,
    PipelineConfig,
    TranslationPipeline,
)
from .prompt_engine import DEFAULT_COMPONENT_NAME, PromptEngine, sanitize_for_prompt
from .retry import retry_with_backoff

__all__ = [
    "DEFAULT_COMPONENT_NAME",
    "FALLBACK_PATTERN",
    "OutputProcessor",
    "PATTERN_FEEDBACK_MAX_CHARS",
    "PipelineConfig",
    "PromptEngine",
    "TranslationPipeline",
    "retry_with_backoff",
    "sanitize_for_prompt",
]
