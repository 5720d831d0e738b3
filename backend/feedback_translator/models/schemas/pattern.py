"""Learned pattern read model."""

from datetime import datetime
from typing import List

from pydantic import BaseModel

from feedback_translator.core.translation.models.result import CodeChange


class LearnedPatternRecord(BaseModel):
    """A learned pattern with its stored solution deserialized."""

    id: str
    pattern: str
    common_solutions: List[CodeChange]
    success_rate: float
    usage_count: int
    created_at: datetime
    updated_at: datetime
