"""Job dispatch channel.

Intake pushes a JobMessage and returns immediately; worker tasks pull
messages and run the pipeline. Messages carry everything the worker
needs, so processing never waits on the request that created the job.
"""

import asyncio
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobMessage:
    """Payload for one analysis job."""

    job_id: str
    owner_id: str
    file_name: str
    source_text: str
    feedback_text: str


class JobQueue:
    """In-process FIFO channel between intake and workers."""

    def __init__(self, maxsize: int = 0):
        self._queue: asyncio.Queue[JobMessage] = asyncio.Queue(maxsize=maxsize)

    async def put(self, message: JobMessage) -> None:
        await self._queue.put(message)
        logger.info(f"Dispatched job {message.job_id} (queued={self._queue.qsize()})")

    async def get(self) -> JobMessage:
        return await self._queue.get()

    def task_done(self) -> None:
        self._queue.task_done()

    async def join(self) -> None:
        """Wait until every dispatched message has been processed."""
        await self._queue.join()

    def qsize(self) -> int:
        return self._queue.qsize()
