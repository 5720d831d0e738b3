"""Shared Pydantic schemas for job intake and read models."""

from .analysis import (
    AnalysisJobRecord,
    CreateAnalysisRequest,
    HistoryItem,
    HistoryPage,
    JobStatusView,
)
from .pattern import LearnedPatternRecord

__all__ = [
    "AnalysisJobRecord",
    "CreateAnalysisRequest",
    "HistoryItem",
    "HistoryPage",
    "JobStatusView",
    "LearnedPatternRecord",
]
