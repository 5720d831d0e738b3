"""Error taxonomy shared by the translation pipeline and the job service."""

from typing import List, Optional


class FeedbackTranslatorError(Exception):
    """Base class for all errors raised by this package."""


class InvalidInputError(FeedbackTranslatorError):
    """Input failed a precondition check. Never retried."""

    def __init__(self, message: str, problems: Optional[List[str]] = None):
        super().__init__(message)
        self.problems = problems or []


class ModelUnavailableError(FeedbackTranslatorError):
    """The model backend failed on every attempt, retries included."""


class ValidationError(FeedbackTranslatorError):
    """The model responded, but its payload is not valid JSON or breaks the schema."""

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage


class TranslationError(FeedbackTranslatorError):
    """A translation run failed as a whole. Wraps the stage error in ``cause``."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class NotFoundError(FeedbackTranslatorError):
    """Job is missing, soft-deleted or owned by someone else.

    The three cases are reported identically.
    """


class InvalidStateError(FeedbackTranslatorError):
    """A status transition was attempted from the wrong state."""

    def __init__(self, job_id: str, expected: str, actual: str):
        super().__init__(
            f"Job {job_id} is {actual}, expected {expected}"
        )
        self.job_id = job_id
        self.expected = expected
        self.actual = actual


class PersistenceError(FeedbackTranslatorError):
    """A read or write against the job store failed."""
