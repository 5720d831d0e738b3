"""Code change and translation result models.

This module defines the output contract of the translation pipeline:
the stage 2 payload (CodeGeneration), the assembled TranslationResult,
and the JSON format used to persist a list of CodeChange.
"""

import json
import math
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ChangeType(str, Enum):
    """Closed set of code change categories."""

    CSS = "css"
    PROPS = "props"
    STRUCTURE = "structure"
    ANIMATION = "animation"


class CodeChange(BaseModel):
    """One atomic before/after edit suggestion.

    ``before`` is expected to match the original source character for
    character; this is not checked here.
    """

    model_config = ConfigDict(strict=True)

    type: ChangeType
    before: str
    after: str
    explanation: str


class CodeGeneration(BaseModel):
    """Stage 2 payload."""

    model_config = ConfigDict(strict=True)

    actionable_changes: List[CodeChange]
    external_dependencies_noted: Optional[List[str]] = None
    parent_component_changes_noted: Optional[List[str]] = None


class TranslationResult(BaseModel):
    """Final output of a translation run."""

    model_config = ConfigDict(strict=True)

    interpretation: str
    actionable_changes: List[CodeChange]
    external_dependencies_noted: Optional[List[str]] = None
    parent_component_changes_noted: Optional[List[str]] = None
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str

    @property
    def confidence_percent(self) -> int:
        """Confidence as an integer percentage, rounded half up."""
        return to_percent(self.confidence)


class PatternCategory(str, Enum):
    """Categories for extracted feedback patterns."""

    STYLE = "Style"
    LAYOUT = "Layout"
    FUNCTIONALITY = "Functionality"
    COPYWRITING = "Copywriting"
    UX = "UX"


class FeedbackPattern(BaseModel):
    """Short, categorized restatement of a piece of feedback."""

    model_config = ConfigDict(strict=True)

    pattern: str = Field(..., max_length=100)
    category: PatternCategory


def to_percent(confidence: float) -> int:
    """Convert a [0, 1] confidence to an integer percentage (round half up)."""
    return int(math.floor(confidence * 100 + 0.5))


_CHANGE_LIST = TypeAdapter(List[CodeChange])


def serialize_changes(changes: List[CodeChange]) -> str:
    """Serialize changes to the JSON array stored in ``suggestions``."""
    return json.dumps([change.model_dump(mode="json") for change in changes])


def deserialize_changes(data: str) -> List[CodeChange]:
    """Parse a stored ``suggestions`` value back into CodeChange objects."""
    return _CHANGE_LIST.validate_json(data)
