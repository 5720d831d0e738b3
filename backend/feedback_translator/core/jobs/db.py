"""Session scope shared by the job and pattern services."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedback_translator.core.errors import PersistenceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def session_scope(
    session_maker: async_sessionmaker[AsyncSession], action: str
) -> AsyncIterator[AsyncSession]:
    """Open a session; database errors surface as PersistenceError."""
    try:
        async with session_maker() as db:
            yield db
    except SQLAlchemyError as e:
        logger.error(f"Database error while trying to {action}: {e}")
        raise PersistenceError(f"Failed to {action}") from e
