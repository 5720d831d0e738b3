"""Pytest fixtures: scripted gateway, in-memory database, wired services."""

import json
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import List, Union

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("GEMINI_API_KEY", "test-dummy-key")

from feedback_translator.config import Settings
from feedback_translator.core.jobs import (
    AnalysisJobService,
    AnalysisWorker,
    JobQueue,
    PatternLearningService,
)
from feedback_translator.core.llm.gateway import LLMGateway
from feedback_translator.core.translation.models import LLMResponse, PromptBundle
from feedback_translator.core.translation.pipeline import PipelineConfig, TranslationPipeline
from feedback_translator.models.database import create_engine, create_session_maker, init_db

PLAN_PAYLOAD = {
    "interpretation": "Increase the font size of the div text",
    "reasoning": "The client asked for bigger text",
    "change_plan": [
        {"element_to_change": "div text", "change_required": "increase font size"}
    ],
    "confidence": 0.9,
}

CODEGEN_PAYLOAD = {
    "actionable_changes": [
        {
            "type": "css",
            "before": "<div>hi</div>",
            "after": '<div className="text-lg">hi</div>',
            "explanation": "increased font size",
        }
    ]
}

SOURCE = "const App = () => <div>hi</div>"


class FakeGateway(LLMGateway):
    """Returns scripted responses in order; Exception entries are raised."""

    def __init__(self, responses: List[Union[str, Exception]], healthy: bool = True):
        self.responses = list(responses)
        self.healthy = healthy
        self.prompts: List[str] = []
        self.bundles: List[PromptBundle] = []

    @property
    def provider(self) -> str:
        return "fake"

    @property
    def model(self) -> str:
        return "fake-model"

    async def call(self, bundle: PromptBundle) -> LLMResponse:
        self.bundles.append(bundle)
        self.prompts.append(bundle.messages[-1].content)
        if not self.responses:
            raise RuntimeError("no scripted response left")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return LLMResponse(content=item, provider=self.provider, model=self.model)

    async def health_check(self) -> bool:
        return self.healthy


async def no_sleep(seconds: float) -> None:
    return None


def make_pipeline(responses, max_retries: int = 3) -> TranslationPipeline:
    return TranslationPipeline(
        FakeGateway(responses),
        PipelineConfig(max_retries=max_retries, base_delay_ms=0, max_jitter_ms=0),
        sleep=no_sleep,
    )


@dataclass
class Stack:
    engine: object
    session_maker: object
    queue: JobQueue
    jobs: AnalysisJobService
    patterns: PatternLearningService
    gateway: FakeGateway
    pipeline: TranslationPipeline
    worker: AnalysisWorker


@pytest.fixture
def test_settings() -> Settings:
    return Settings(database_url="sqlite+aiosqlite:///:memory:", _env_file=None)


@pytest.fixture
def plan_json() -> str:
    return json.dumps(PLAN_PAYLOAD)


@pytest.fixture
def codegen_json() -> str:
    return json.dumps(CODEGEN_PAYLOAD)


@pytest.fixture
def stack_factory(test_settings):
    """Async context manager building a fresh database and services."""

    @asynccontextmanager
    async def build(responses=()):
        engine = create_engine(test_settings.database_url)
        await init_db(engine)
        session_maker = create_session_maker(engine)
        queue = JobQueue()
        pipeline = make_pipeline(list(responses))
        patterns = PatternLearningService(session_maker, pipeline)
        jobs = AnalysisJobService(session_maker, queue, test_settings, patterns=patterns)
        worker = AnalysisWorker(queue, jobs, pipeline)
        try:
            yield Stack(
                engine=engine,
                session_maker=session_maker,
                queue=queue,
                jobs=jobs,
                patterns=patterns,
                gateway=pipeline.gateway,
                pipeline=pipeline,
                worker=worker,
            )
        finally:
            await engine.dispose()

    return build
