"""Centralized enum definitions for database models."""

from enum import Enum


class AnalysisStatus(str, Enum):
    """Analysis job status enum.

    Transitions only move forward:
    PENDING -> PROCESSING -> COMPLETE | FAILED.
    """

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"
