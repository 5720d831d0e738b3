"""Analysis job service: persistence and status transitions.

Every transition is a single conditional UPDATE keyed by job id (and,
when given, owner id) that only matches rows in the expected state:

    PENDING -> PROCESSING -> COMPLETE | FAILED

The worker drives transitions. The model is only reached indirectly,
when a high rating hands a result to pattern learning.
"""

import logging
import uuid
from datetime import timedelta
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedback_translator.config import Settings
from feedback_translator.core.errors import (
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)
from feedback_translator.core.translation.models.result import (
    TranslationResult,
    deserialize_changes,
    serialize_changes,
)
from feedback_translator.models.database import AnalysisJob, AnalysisStatus, utcnow
from feedback_translator.models.schemas.analysis import (
    AnalysisJobRecord,
    CreateAnalysisRequest,
    HistoryItem,
    HistoryPage,
    JobStatusView,
)

from .channel import JobMessage, JobQueue
from .db import session_scope
from .patterns import PatternLearningService

logger = logging.getLogger(__name__)

MAX_HISTORY_LIMIT = 50

# Ratings at or above this feed pattern learning
LEARNING_MIN_RATING = 4


class AnalysisJobService:
    """Owns AnalysisJob rows and their lifecycle."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        queue: JobQueue,
        settings: Settings,
        patterns: Optional[PatternLearningService] = None,
    ):
        self._session_maker = session_maker
        self._queue = queue
        self._settings = settings
        self._patterns = patterns

    def _session(self, action: str):
        return session_scope(self._session_maker, action)

    # =========================================================================
    # Intake
    # =========================================================================

    async def create_job(
        self,
        file_name: str,
        file_size: int,
        source_text: str,
        feedback_text: str,
        owner_id: str,
    ) -> AnalysisJobRecord:
        """Persist a PENDING job and dispatch it to the workers.

        Returns as soon as the message is queued.

        Raises:
            InvalidInputError: If intake validation fails (nothing is written)
            PersistenceError: If the row cannot be written
        """
        try:
            request = CreateAnalysisRequest.model_validate(
                {
                    "user_id": owner_id,
                    "file_name": file_name,
                    "file_size": file_size,
                    "original_content": source_text,
                    "feedback": feedback_text,
                },
                context={
                    "max_source_chars": self._settings.max_source_chars,
                    "max_file_size_bytes": self._settings.max_file_size_bytes,
                },
            )
        except PydanticValidationError as e:
            problems = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise InvalidInputError(
                f"Invalid analysis request: {'; '.join(problems)}", problems=problems
            ) from e

        now = utcnow()
        job = AnalysisJob(
            id=str(uuid.uuid4()),
            user_id=request.user_id,
            file_name=request.file_name,
            file_size=request.file_size,
            original_content=request.original_content,
            feedback=request.feedback,
            status=AnalysisStatus.PENDING.value,
            created_at=now,
            updated_at=now,
            is_deleted=False,
        )
        async with self._session("create analysis job") as db:
            db.add(job)
            await db.commit()

        logger.info(f"Created analysis job {job.id} for user {job.user_id}")

        await self.dispatch(
            job.id, job.user_id, job.file_name, job.original_content, job.feedback
        )
        return self._to_record(job)

    async def dispatch(
        self,
        job_id: str,
        owner_id: str,
        file_name: str,
        source_text: str,
        feedback_text: str,
    ) -> None:
        """Emit a processing message for the worker."""
        await self._queue.put(
            JobMessage(
                job_id=job_id,
                owner_id=owner_id,
                file_name=file_name,
                source_text=source_text,
                feedback_text=feedback_text,
            )
        )

    # =========================================================================
    # Transitions
    # =========================================================================

    async def begin(self, job_id: str, owner_id: Optional[str] = None) -> None:
        """PENDING -> PROCESSING."""
        await self._transition(
            job_id, AnalysisStatus.PENDING, AnalysisStatus.PROCESSING, owner_id
        )
        logger.info(f"Analysis job {job_id} status updated to PROCESSING")

    async def complete(
        self,
        job_id: str,
        result: TranslationResult,
        owner_id: Optional[str] = None,
    ) -> None:
        """PROCESSING -> COMPLETE, writing all four outputs at once."""
        await self._transition(
            job_id,
            AnalysisStatus.PROCESSING,
            AnalysisStatus.COMPLETE,
            owner_id,
            interpretation=result.interpretation,
            suggestions=serialize_changes(result.actionable_changes),
            confidence=result.confidence_percent,
            reasoning=result.reasoning,
        )
        logger.info(
            f"Analysis job {job_id} completed: confidence={result.confidence_percent}, "
            f"suggestions={len(result.actionable_changes)}"
        )

    async def fail(
        self,
        job_id: str,
        error: Optional[BaseException] = None,
        owner_id: Optional[str] = None,
    ) -> None:
        """PROCESSING -> FAILED. The error is logged, never stored."""
        await self._transition(
            job_id, AnalysisStatus.PROCESSING, AnalysisStatus.FAILED, owner_id
        )
        logger.error(f"Analysis job {job_id} failed: {error}")

    async def _transition(
        self,
        job_id: str,
        expected: AnalysisStatus,
        target: AnalysisStatus,
        owner_id: Optional[str],
        **values,
    ) -> None:
        conditions = [AnalysisJob.id == job_id, AnalysisJob.status == expected.value]
        if owner_id is not None:
            conditions.append(AnalysisJob.user_id == owner_id)

        async with self._session(f"mark job {job_id} {target.value}") as db:
            result = await db.execute(
                update(AnalysisJob)
                .where(*conditions)
                .values(status=target.value, updated_at=utcnow(), **values)
            )
            if result.rowcount == 0:
                await db.rollback()
                current = await db.get(AnalysisJob, job_id)
                if current is None or (owner_id is not None and current.user_id != owner_id):
                    raise NotFoundError(f"Analysis job {job_id} not found")
                raise InvalidStateError(job_id, expected.value, current.status)
            await db.commit()

    async def reap_stale(self, timeout_seconds: int) -> List[str]:
        """Fail PROCESSING jobs not updated within ``timeout_seconds``.

        Returns:
            Ids of the jobs that were failed
        """
        cutoff = utcnow() - timedelta(seconds=timeout_seconds)
        stale = and_(
            AnalysisJob.status == AnalysisStatus.PROCESSING.value,
            AnalysisJob.updated_at < cutoff,
        )

        async with self._session("reap stale jobs") as db:
            job_ids = list((await db.execute(select(AnalysisJob.id).where(stale))).scalars())
            if not job_ids:
                return []

            await db.execute(
                update(AnalysisJob)
                .where(stale, AnalysisJob.id.in_(job_ids))
                .values(status=AnalysisStatus.FAILED.value, updated_at=utcnow())
            )
            await db.commit()

        for job_id in job_ids:
            logger.warning(
                f"Analysis job {job_id} stuck in PROCESSING for over {timeout_seconds}s, marked FAILED"
            )
        return job_ids

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_status(self, job_id: str, owner_id: str) -> JobStatusView:
        """Read-only status snapshot.

        Raises:
            NotFoundError: If the job is missing, deleted, or not owned by owner_id
        """
        async with self._session("read job status") as db:
            job = await self._get_owned(db, job_id, owner_id)
            return JobStatusView(
                status=AnalysisStatus(job.status),
                created_at=job.created_at,
                updated_at=job.updated_at,
            )

    async def get_result(self, job_id: str, owner_id: str) -> AnalysisJobRecord:
        """Full job record with suggestions deserialized.

        Raises:
            NotFoundError: Same conditions as get_status
        """
        async with self._session("read job result") as db:
            job = await self._get_owned(db, job_id, owner_id)
            return self._to_record(job)

    async def list_history(
        self,
        owner_id: str,
        limit: int = 20,
        cursor: Optional[str] = None,
    ) -> HistoryPage:
        """Owner's jobs, newest first.

        ``cursor`` is the last id of the previous page; it stays usable
        after that job is soft-deleted.
        """
        self._check_limit(limit)

        async with self._session("list history") as db:
            query = select(AnalysisJob).where(
                AnalysisJob.user_id == owner_id,
                AnalysisJob.is_deleted.is_(False),
            )
            if cursor:
                anchor = await self._get_owned(
                    db, cursor, owner_id, include_deleted=True
                )
                query = query.where(
                    or_(
                        AnalysisJob.created_at < anchor.created_at,
                        and_(
                            AnalysisJob.created_at == anchor.created_at,
                            AnalysisJob.id < anchor.id,
                        ),
                    )
                )
            query = query.order_by(
                AnalysisJob.created_at.desc(), AnalysisJob.id.desc()
            ).limit(limit + 1)

            rows = list((await db.execute(query)).scalars())

        next_cursor = None
        if len(rows) > limit:
            rows = rows[:limit]
            next_cursor = rows[-1].id

        return HistoryPage(
            items=[HistoryItem.model_validate(row) for row in rows],
            next_cursor=next_cursor,
        )

    async def search_history(
        self, owner_id: str, query: str, limit: int = 20
    ) -> List[HistoryItem]:
        """Case-insensitive search over file name, feedback and interpretation."""
        self._check_limit(limit)
        if not query or not query.strip():
            raise InvalidInputError("Search query cannot be empty")

        escaped = (
            query.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        )
        pattern = f"%{escaped}%"

        async with self._session("search history") as db:
            rows = (
                await db.execute(
                    select(AnalysisJob)
                    .where(
                        AnalysisJob.user_id == owner_id,
                        AnalysisJob.is_deleted.is_(False),
                        or_(
                            AnalysisJob.file_name.ilike(pattern, escape="\\"),
                            AnalysisJob.feedback.ilike(pattern, escape="\\"),
                            AnalysisJob.interpretation.ilike(pattern, escape="\\"),
                        ),
                    )
                    .order_by(AnalysisJob.created_at.desc(), AnalysisJob.id.desc())
                    .limit(limit)
                )
            ).scalars()
            return [HistoryItem.model_validate(row) for row in rows]

    async def soft_delete(self, job_id: str, owner_id: str) -> None:
        """Hide a job from every query. The row is kept."""
        async with self._session("delete job") as db:
            job = await self._get_owned(db, job_id, owner_id)
            job.is_deleted = True
            job.deleted_at = utcnow()
            await db.commit()
        logger.info(f"Analysis job {job_id} soft-deleted by user {owner_id}")

    async def rate(self, job_id: str, owner_id: str, rating: int) -> AnalysisJobRecord:
        """Store a 1-5 rating on a COMPLETE job.

        A rating of LEARNING_MIN_RATING or more records the job's feedback
        and suggestions as a successful pattern. Rating again overwrites
        the stored value.

        Raises:
            InvalidInputError: If rating is not an integer in 1..5
            NotFoundError: Same conditions as get_status
            InvalidStateError: If the job is not COMPLETE
            PersistenceError: If the rating or pattern cannot be written
        """
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise InvalidInputError(f"rating must be an integer between 1 and 5, got {rating!r}")

        async with self._session("rate job") as db:
            job = await self._get_owned(db, job_id, owner_id)
            if job.status != AnalysisStatus.COMPLETE.value:
                raise InvalidStateError(job_id, AnalysisStatus.COMPLETE.value, job.status)
            job.rating = rating
            await db.commit()

        logger.info(f"Analysis job {job_id} rated {rating} by user {owner_id}")
        record = self._to_record(job)

        if rating >= LEARNING_MIN_RATING and self._patterns is not None:
            await self._patterns.record_success(record.feedback, record.suggestions or [])
        return record

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _get_owned(
        self,
        db: AsyncSession,
        job_id: str,
        owner_id: str,
        include_deleted: bool = False,
    ) -> AnalysisJob:
        query = select(AnalysisJob).where(
            AnalysisJob.id == job_id, AnalysisJob.user_id == owner_id
        )
        if not include_deleted:
            query = query.where(AnalysisJob.is_deleted.is_(False))
        result = await db.execute(query)
        job = result.scalar_one_or_none()
        if job is None:
            raise NotFoundError(f"Analysis job {job_id} not found")
        return job

    @staticmethod
    def _check_limit(limit: int) -> None:
        if not 1 <= limit <= MAX_HISTORY_LIMIT:
            raise InvalidInputError(
                f"limit must be between 1 and {MAX_HISTORY_LIMIT}, got {limit}"
            )

    @staticmethod
    def _to_record(job: AnalysisJob) -> AnalysisJobRecord:
        return AnalysisJobRecord(
            id=job.id,
            user_id=job.user_id,
            file_name=job.file_name,
            file_size=job.file_size,
            original_content=job.original_content,
            feedback=job.feedback,
            interpretation=job.interpretation,
            suggestions=(
                deserialize_changes(job.suggestions)
                if job.suggestions is not None
                else None
            ),
            confidence=job.confidence,
            reasoning=job.reasoning,
            rating=job.rating,
            status=AnalysisStatus(job.status),
            created_at=job.created_at,
            updated_at=job.updated_at,
            is_deleted=job.is_deleted,
            deleted_at=job.deleted_at,
        )
