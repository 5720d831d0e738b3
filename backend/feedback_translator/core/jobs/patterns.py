"""Pattern learning from highly rated analyses.

A well-rated result is condensed into a short pattern phrase by the
pipeline; the phrase keys a LearnedPattern row holding the latest
successful changes, a usage count and a running success rate.
"""

import logging
import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedback_translator.core.errors import InvalidInputError
from feedback_translator.core.translation.models.result import (
    CodeChange,
    deserialize_changes,
    serialize_changes,
)
from feedback_translator.core.translation.pipeline import (
    PATTERN_FEEDBACK_MAX_CHARS,
    TranslationPipeline,
)
from feedback_translator.models.database import LearnedPattern, utcnow
from feedback_translator.models.schemas.pattern import LearnedPatternRecord

from .db import session_scope

logger = logging.getLogger(__name__)

MAX_PATTERN_LIMIT = 50


class PatternLearningService:
    """Upserts learned patterns and lists the most used ones."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        pipeline: TranslationPipeline,
    ):
        self._session_maker = session_maker
        self._pipeline = pipeline

    async def record_success(
        self, feedback_text: str, changes: List[CodeChange]
    ) -> LearnedPatternRecord:
        """Count one more success for the pattern behind ``feedback_text``.

        The stored solution is replaced by ``changes``. The success rate is
        a running mean over successes, each counting as 1.

        Raises:
            PersistenceError: If the pattern row cannot be written
        """
        pattern = await self._pipeline.extract_pattern(
            feedback_text[:PATTERN_FEEDBACK_MAX_CHARS]
        )
        solutions = serialize_changes(changes)

        async with session_scope(self._session_maker, "record feedback pattern") as db:
            row = (
                await db.execute(
                    select(LearnedPattern).where(LearnedPattern.pattern == pattern)
                )
            ).scalar_one_or_none()

            now = utcnow()
            if row is None:
                row = LearnedPattern(
                    id=str(uuid.uuid4()),
                    pattern=pattern,
                    common_solutions=solutions,
                    success_rate=1.0,
                    usage_count=1,
                    created_at=now,
                    updated_at=now,
                )
                db.add(row)
                logger.info(f"New feedback pattern '{pattern}'")
            else:
                count = row.usage_count
                row.success_rate = (row.success_rate * count + 1) / (count + 1)
                row.usage_count = count + 1
                row.common_solutions = solutions
                row.updated_at = now
                logger.info(
                    f"Feedback pattern '{pattern}' updated: usage_count={row.usage_count}"
                )
            await db.commit()

        return self._to_record(row)

    async def top_patterns(self, limit: int = 10) -> List[LearnedPatternRecord]:
        """Most used patterns first."""
        if not 1 <= limit <= MAX_PATTERN_LIMIT:
            raise InvalidInputError(
                f"limit must be between 1 and {MAX_PATTERN_LIMIT}, got {limit}"
            )

        async with session_scope(self._session_maker, "list feedback patterns") as db:
            rows = (
                await db.execute(
                    select(LearnedPattern)
                    .order_by(
                        LearnedPattern.usage_count.desc(), LearnedPattern.updated_at.desc()
                    )
                    .limit(limit)
                )
            ).scalars()
            return [self._to_record(row) for row in rows]

    @staticmethod
    def _to_record(row: LearnedPattern) -> LearnedPatternRecord:
        return LearnedPatternRecord(
            id=row.id,
            pattern=row.pattern,
            common_solutions=deserialize_changes(row.common_solutions),
            success_rate=row.success_rate,
            usage_count=row.usage_count,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
