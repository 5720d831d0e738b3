"""Learned feedback pattern database model."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from feedback_translator.models.database.base import Base, utcnow


class LearnedPattern(Base):
    """A recurring kind of feedback and the latest changes that satisfied it.

    Rows are created and updated only when a user rates a completed
    analysis highly.
    """

    __tablename__ = "feedback_patterns"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    pattern: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    common_solutions: Mapped[str] = mapped_column(Text, nullable=False)  # JSON array of CodeChange
    success_rate: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
