"""Analysis job request and response schemas."""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    computed_field,
    field_validator,
)

from feedback_translator.core.translation.models.result import CodeChange
from feedback_translator.models.database.enums import AnalysisStatus

ALLOWED_FILE_PATTERN = re.compile(r"\.(tsx|jsx|js|ts)$", re.IGNORECASE)


class CreateAnalysisRequest(BaseModel):
    """Inputs accepted at job intake.

    Configurable limits are passed through the validation context:
    ``max_source_chars`` and ``max_file_size_bytes``.
    """

    user_id: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1, max_length=255)
    file_size: int = Field(..., gt=0)
    original_content: str = Field(..., min_length=1)
    feedback: str = Field(..., min_length=10, max_length=2000)

    @field_validator("file_name")
    @classmethod
    def _check_extension(cls, value: str) -> str:
        if not ALLOWED_FILE_PATTERN.search(value):
            raise ValueError("Must be a JavaScript/TypeScript file (.tsx, .jsx, .ts, .js)")
        return value

    @field_validator("feedback")
    @classmethod
    def _check_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Feedback cannot be empty")
        return value

    @field_validator("original_content")
    @classmethod
    def _check_source_length(cls, value: str, info: ValidationInfo) -> str:
        limit = (info.context or {}).get("max_source_chars")
        if limit is not None and len(value) > limit:
            raise ValueError(f"Source must be at most {limit} characters")
        return value

    @field_validator("file_size")
    @classmethod
    def _check_file_size(cls, value: int, info: ValidationInfo) -> int:
        limit = (info.context or {}).get("max_file_size_bytes")
        if limit is not None and value > limit:
            raise ValueError(f"File must be at most {limit} bytes")
        return value


class AnalysisJobRecord(BaseModel):
    """Full analysis job, with suggestions deserialized."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    file_name: str
    file_size: int
    original_content: str
    feedback: str
    interpretation: Optional[str] = None
    suggestions: Optional[List[CodeChange]] = None
    confidence: Optional[int] = None
    reasoning: Optional[str] = None
    rating: Optional[int] = None
    status: AnalysisStatus
    created_at: datetime
    updated_at: datetime
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None


class JobStatusView(BaseModel):
    """Status snapshot for polling clients."""

    status: AnalysisStatus
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def is_pending(self) -> bool:
        return self.status == AnalysisStatus.PENDING

    @computed_field
    @property
    def is_processing(self) -> bool:
        return self.status == AnalysisStatus.PROCESSING

    @computed_field
    @property
    def is_complete(self) -> bool:
        return self.status == AnalysisStatus.COMPLETE

    @computed_field
    @property
    def is_failed(self) -> bool:
        return self.status == AnalysisStatus.FAILED


class HistoryItem(BaseModel):
    """Summary row for the history list."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    file_name: str
    feedback: str
    confidence: Optional[int] = None
    status: AnalysisStatus
    created_at: datetime


class HistoryPage(BaseModel):
    """One page of history, newest first."""

    items: List[HistoryItem]
    next_cursor: Optional[str] = None
