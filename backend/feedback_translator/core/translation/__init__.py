"""Translation package.

Architecture:
- models/: Data models (InterpretationPlan, CodeChange, TranslationResult, ...)
- pipeline/: Pipeline components (PromptEngine, OutputProcessor, TranslationPipeline)

Pipeline components are imported from ``.pipeline`` directly; only the
models are re-exported here so that the LLM gateway can depend on them
without an import cycle.
"""

from .models import (
    ChangePlanItem,
    InterpretationPlan,
    Message,
    PromptBundle,
    TokenUsage,
    LLMResponse,
    ChangeType,
    CodeChange,
    CodeGeneration,
    TranslationResult,
)

__all__ = [
    "ChangePlanItem",
    "InterpretationPlan",
    "Message",
    "PromptBundle",
    "TokenUsage",
    "LLMResponse",
    "ChangeType",
    "CodeChange",
    "CodeGeneration",
    "TranslationResult",
]
