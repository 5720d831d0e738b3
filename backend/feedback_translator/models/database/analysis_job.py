"""Analysis job database model."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from feedback_translator.models.database.base import Base, utcnow
from feedback_translator.models.database.enums import AnalysisStatus


class AnalysisJob(Base):
    """One feedback-translation request and its results.

    The four output columns (interpretation, suggestions, confidence,
    reasoning) are written together by the COMPLETE transition and are
    NULL in every other state.
    """

    __tablename__ = "analyses"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)

    # Inputs
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    original_content: Mapped[str] = mapped_column(Text, nullable=False)
    feedback: Mapped[str] = mapped_column(Text, nullable=False)

    # Outputs
    interpretation: Mapped[Optional[str]] = mapped_column(Text)
    suggestions: Mapped[Optional[str]] = mapped_column(Text)  # JSON array of CodeChange
    confidence: Mapped[Optional[int]] = mapped_column(Integer)  # 0-100
    reasoning: Mapped[Optional[str]] = mapped_column(Text)

    # User rating 1-5, only set on COMPLETE jobs
    rating: Mapped[Optional[int]] = mapped_column(Integer)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AnalysisStatus.PENDING.value
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    # Soft delete
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    __table_args__ = (
        Index("ix_analyses_user_created", "user_id", "created_at"),
        Index("ix_analyses_status_updated", "status", "updated_at"),
    )
