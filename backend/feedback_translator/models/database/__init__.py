"""Database models package."""

from feedback_translator.models.database.base import (
    Base,
    create_engine,
    create_session_maker,
    init_db,
    utcnow,
)
from feedback_translator.models.database.analysis_job import AnalysisJob
from feedback_translator.models.database.learned_pattern import LearnedPattern
from feedback_translator.models.database.enums import AnalysisStatus

__all__ = [
    # Base
    "Base",
    "create_engine",
    "create_session_maker",
    "init_db",
    "utcnow",
    # Models
    "AnalysisJob",
    "LearnedPattern",
    # Enums
    "AnalysisStatus",
]
