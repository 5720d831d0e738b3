"""End-to-end tests: intake -> worker -> terminal state."""

import asyncio

import pytest

from feedback_translator.core.errors import InvalidStateError
from feedback_translator.core.jobs import StaleJobReaper
from feedback_translator.models.database import AnalysisStatus

from conftest import SOURCE

OWNER = "user-1"


def test_job_completes(stack_factory, plan_json, codegen_json):
    async def scenario():
        async with stack_factory([plan_json, codegen_json]) as stack:
            record = await stack.jobs.create_job(
                "App.tsx", 512, SOURCE, "make the text bigger", OWNER
            )
            status = await stack.worker.process(await stack.queue.get())
            return status, await stack.jobs.get_result(record.id, OWNER)

    status, result = asyncio.run(scenario())

    assert status is AnalysisStatus.COMPLETE
    assert result.status is AnalysisStatus.COMPLETE
    assert result.confidence == 90
    assert len(result.suggestions) == 1
    assert result.suggestions[0].type.value == "css"
    assert result.suggestions[0].after == '<div className="text-lg">hi</div>'


def test_malformed_model_output_fails_job(stack_factory, codegen_json):
    async def scenario():
        async with stack_factory(["Sure! Here is what I think...", codegen_json]) as stack:
            record = await stack.jobs.create_job(
                "App.tsx", 512, SOURCE, "make the text bigger", OWNER
            )
            status = await stack.worker.process(await stack.queue.get())
            return status, await stack.jobs.get_result(record.id, OWNER)

    status, result = asyncio.run(scenario())

    assert status is AnalysisStatus.FAILED
    assert result.status is AnalysisStatus.FAILED
    assert result.suggestions is None
    assert result.interpretation is None
    assert result.confidence is None


def test_source_too_short_for_pipeline_fails_job(stack_factory):
    async def scenario():
        async with stack_factory() as stack:
            record = await stack.jobs.create_job(
                "Tiny.tsx", 5, "<a/>", "make the link red please", OWNER
            )
            status = await stack.worker.process(await stack.queue.get())
            return status, stack.gateway.prompts, await stack.jobs.get_status(record.id, OWNER)

    status, prompts, view = asyncio.run(scenario())

    assert status is AnalysisStatus.FAILED
    assert prompts == []
    assert view.is_failed


def test_unexpected_error_fails_job_and_propagates(stack_factory):
    async def scenario():
        async with stack_factory() as stack:
            record = await stack.jobs.create_job(
                "App.tsx", 512, SOURCE, "make the text bigger", OWNER
            )

            async def explode(*args):
                raise KeyError("unexpected")

            stack.pipeline.translate_feedback = explode
            with pytest.raises(KeyError):
                await stack.worker.process(await stack.queue.get())
            return await stack.jobs.get_status(record.id, OWNER)

    assert asyncio.run(scenario()).is_failed


def test_message_for_started_job_is_rejected(stack_factory, plan_json, codegen_json):
    async def scenario():
        async with stack_factory([plan_json, codegen_json]) as stack:
            record = await stack.jobs.create_job(
                "App.tsx", 512, SOURCE, "make the text bigger", OWNER
            )
            message = await stack.queue.get()
            await stack.worker.process(message)
            with pytest.raises(InvalidStateError):
                await stack.worker.process(message)
            return await stack.jobs.get_result(record.id, OWNER)

    assert asyncio.run(scenario()).status is AnalysisStatus.COMPLETE


def test_background_worker_drains_queue(stack_factory, plan_json, codegen_json):
    async def scenario():
        async with stack_factory([plan_json, codegen_json, "not json"]) as stack:
            stack.worker.start()
            try:
                first = await stack.jobs.create_job(
                    "A.tsx", 512, SOURCE, "make the text bigger", OWNER
                )
                second = await stack.jobs.create_job(
                    "B.tsx", 512, SOURCE, "make the text smaller", OWNER
                )
                await asyncio.wait_for(stack.queue.join(), timeout=5)
            finally:
                await stack.worker.stop()
            return [
                (await stack.jobs.get_status(job.id, OWNER)).status
                for job in (first, second)
            ]

    assert asyncio.run(scenario()) == [AnalysisStatus.COMPLETE, AnalysisStatus.FAILED]


def test_reaper_run_once(stack_factory):
    async def scenario():
        async with stack_factory() as stack:
            record = await stack.jobs.create_job(
                "App.tsx", 512, SOURCE, "make the text bigger", OWNER
            )
            await stack.jobs.begin(record.id)
            reaper = StaleJobReaper(stack.jobs, timeout_seconds=0, interval_seconds=60)
            await asyncio.sleep(0.01)
            reaped = await reaper.run_once()
            return record, reaped, await stack.jobs.get_status(record.id, OWNER)

    record, reaped, view = asyncio.run(scenario())

    assert reaped == [record.id]
    assert view.is_failed
