"""Analysis job lifecycle: persistence, dispatch, background processing
and pattern learning from ratings."""

from .channel import JobMessage, JobQueue
from .patterns import PatternLearningService
from .service import AnalysisJobService
from .worker import AnalysisWorker, StaleJobReaper

__all__ = [
    "AnalysisJobService",
    "AnalysisWorker",
    "JobMessage",
    "JobQueue",
    "PatternLearningService",
    "StaleJobReaper",
]
