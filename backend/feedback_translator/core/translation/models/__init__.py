"""Translation pipeline data models.

This module provides structured data models for the translation pipeline,
ensuring type safety and clear contracts between components.
"""

from .plan import ChangePlanItem, InterpretationPlan
from .prompt import JSON_RESPONSE_FORMAT, Message, PromptBundle
from .response import TokenUsage, LLMResponse
from .result import (
    ChangeType,
    CodeChange,
    CodeGeneration,
    FeedbackPattern,
    PatternCategory,
    TranslationResult,
    deserialize_changes,
    serialize_changes,
    to_percent,
)

__all__ = [
    # Plan models
    "ChangePlanItem",
    "InterpretationPlan",
    # Prompt models
    "JSON_RESPONSE_FORMAT",
    "Message",
    "PromptBundle",
    # Response models
    "TokenUsage",
    "LLMResponse",
    # Result models
    "ChangeType",
    "CodeChange",
    "CodeGeneration",
    "FeedbackPattern",
    "PatternCategory",
    "TranslationResult",
    "deserialize_changes",
    "serialize_changes",
    "to_percent",
]
