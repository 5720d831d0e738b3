"""Background worker and stale-job reaper.

A worker pulls JobMessages from the channel and runs one job at a time
per task: begin -> translate -> complete | fail. The reaper fails jobs
left in PROCESSING by a worker that died mid-run.
"""

import asyncio
import logging
from typing import List, Optional

from feedback_translator.core.errors import InvalidInputError, TranslationError
from feedback_translator.core.translation.pipeline import TranslationPipeline
from feedback_translator.models.database import AnalysisStatus

from .channel import JobMessage, JobQueue
from .service import AnalysisJobService

logger = logging.getLogger(__name__)


class AnalysisWorker:
    """Consumes dispatched jobs and drives their transitions."""

    def __init__(
        self,
        queue: JobQueue,
        jobs: AnalysisJobService,
        pipeline: TranslationPipeline,
        concurrency: int = 1,
    ):
        self.queue = queue
        self.jobs = jobs
        self.pipeline = pipeline
        self.concurrency = max(1, concurrency)
        self._tasks: List[asyncio.Task] = []

    def start(self) -> None:
        """Start the consumer tasks on the running loop."""
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._run(), name=f"analysis-worker-{i}")
            for i in range(self.concurrency)
        ]
        logger.info(f"Started {self.concurrency} analysis worker(s)")

    async def stop(self) -> None:
        """Cancel the consumer tasks. In-flight jobs stay PROCESSING."""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Analysis workers stopped")

    async def _run(self) -> None:
        while True:
            message = await self.queue.get()
            try:
                await self.process(message)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(f"Worker error while processing job {message.job_id}")
            finally:
                self.queue.task_done()

    async def process(self, message: JobMessage) -> AnalysisStatus:
        """Run one job to a terminal state.

        Returns:
            The terminal status written

        Raises:
            InvalidStateError: If the job was not PENDING
            PersistenceError: If a transition could not be written
        """
        await self.jobs.begin(message.job_id, owner_id=message.owner_id)

        try:
            result = await self.pipeline.translate_feedback(
                message.file_name, message.source_text, message.feedback_text
            )
        except (TranslationError, InvalidInputError) as e:
            await self.jobs.fail(message.job_id, e, owner_id=message.owner_id)
            return AnalysisStatus.FAILED
        except Exception as e:
            await self.jobs.fail(message.job_id, e, owner_id=message.owner_id)
            raise

        await self.jobs.complete(message.job_id, result, owner_id=message.owner_id)
        return AnalysisStatus.COMPLETE


class StaleJobReaper:
    """Periodically fails jobs stuck in PROCESSING."""

    def __init__(
        self,
        jobs: AnalysisJobService,
        timeout_seconds: int,
        interval_seconds: int,
    ):
        self.jobs = jobs
        self.timeout_seconds = timeout_seconds
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="stale-job-reaper")

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None

    async def run_once(self) -> List[str]:
        return await self.jobs.reap_stale(self.timeout_seconds)

    async def _run(self) -> None:
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Stale job reaping failed")
            await asyncio.sleep(self.interval_seconds)
