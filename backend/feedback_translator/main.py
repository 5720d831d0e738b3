"""Main FastAPI application.

Builds the process-wide services once at startup and hands them to
each other explicitly; nothing below is a module-level singleton.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI, Request

from feedback_translator.config import Settings, settings
from feedback_translator.core.jobs import (
    AnalysisJobService,
    AnalysisWorker,
    JobQueue,
    PatternLearningService,
    StaleJobReaper,
)
from feedback_translator.core.llm import LiteLLMGateway, LLMRuntimeConfig
from feedback_translator.core.translation.pipeline import PipelineConfig, TranslationPipeline
from feedback_translator.models.database import create_engine, create_session_maker, init_db

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the worker path needs, scoped to one process."""

    jobs: AnalysisJobService
    pipeline: TranslationPipeline
    worker: AnalysisWorker
    reaper: StaleJobReaper


def build_services(config: Settings, session_maker) -> Services:
    """Wire gateway -> pipeline -> queue, patterns -> job service -> worker."""
    gateway = LiteLLMGateway(LLMRuntimeConfig.from_settings(config))
    pipeline = TranslationPipeline(gateway, PipelineConfig.from_settings(config))
    queue = JobQueue()
    patterns = PatternLearningService(session_maker, pipeline)
    jobs = AnalysisJobService(session_maker, queue, config, patterns=patterns)
    worker = AnalysisWorker(queue, jobs, pipeline, concurrency=config.worker_concurrency)
    reaper = StaleJobReaper(
        jobs,
        timeout_seconds=config.stale_job_timeout_seconds,
        interval_seconds=config.reaper_interval_seconds,
    )
    return Services(jobs=jobs, pipeline=pipeline, worker=worker, reaper=reaper)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logging.basicConfig(level=settings.log_level)

    # Startup: Initialize database
    engine = create_engine(settings.database_url, echo=settings.debug)
    await init_db(engine)

    services = build_services(settings, create_session_maker(engine))
    services.worker.start()
    services.reaper.start()
    app.state.services = services

    yield

    # Shutdown: stop background tasks, then release connections
    await services.reaper.stop()
    await services.worker.stop()
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Translates client feedback on React components into code changes",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/health")
async def health(request: Request):
    """Health check endpoint; reports whether the model backend answers."""
    services: Services = request.app.state.services
    model_available = await services.pipeline.health_check()
    return {
        "status": "healthy" if model_available else "degraded",
        "model_available": model_available,
    }
