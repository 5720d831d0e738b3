"""Tests for the two-stage translation pipeline."""

import asyncio
import json

import pytest

from feedback_translator.core.errors import (
    InvalidInputError,
    ModelUnavailableError,
    TranslationError,
    ValidationError,
)
from feedback_translator.core.translation.models import ChangeType
from feedback_translator.core.translation.pipeline import FALLBACK_PATTERN

from conftest import CODEGEN_PAYLOAD, SOURCE, make_pipeline

FEEDBACK = "make the text bigger"


def test_translate_feedback_happy_path(plan_json, codegen_json):
    pipeline = make_pipeline([plan_json, codegen_json])

    result = asyncio.run(pipeline.translate_feedback("App.tsx", SOURCE, FEEDBACK))

    assert result.interpretation == "Increase the font size of the div text"
    assert result.reasoning == "The client asked for bigger text"
    assert result.confidence == 0.9
    assert result.confidence_percent == 90
    assert len(result.actionable_changes) == 1
    assert result.actionable_changes[0].type is ChangeType.CSS
    assert result.actionable_changes[0].before == "<div>hi</div>"


def test_stage_two_never_sees_raw_feedback(plan_json, codegen_json):
    pipeline = make_pipeline([plan_json, codegen_json])
    feedback = "please make the text bigger"

    asyncio.run(pipeline.translate_feedback("App.tsx", SOURCE, feedback))

    interpretation_prompt, generation_prompt = pipeline.gateway.prompts
    assert feedback in interpretation_prompt
    assert feedback not in generation_prompt
    assert "increase font size" in generation_prompt


def test_requests_json_output(plan_json, codegen_json):
    pipeline = make_pipeline([plan_json, codegen_json])

    asyncio.run(pipeline.translate_feedback("App.tsx", SOURCE, FEEDBACK))

    for bundle in pipeline.gateway.bundles:
        assert bundle.response_format == {"type": "json_object"}


def test_optional_notes_are_carried(plan_json):
    generation = dict(CODEGEN_PAYLOAD, external_dependencies_noted=["framer-motion"])
    pipeline = make_pipeline([plan_json, json.dumps(generation)])

    result = asyncio.run(pipeline.translate_feedback("App.tsx", SOURCE, FEEDBACK))

    assert result.external_dependencies_noted == ["framer-motion"]
    assert result.parent_component_changes_noted is None


@pytest.mark.parametrize(
    "component_name, source_text, feedback_text",
    [
        ("App.tsx", SOURCE, "hey"),
        ("App.tsx", "short", FEEDBACK),
        ("", SOURCE, FEEDBACK),
        ("App.tsx", SOURCE, "x" * 1001),
    ],
)
def test_invalid_input_is_rejected_before_any_call(
    component_name, source_text, feedback_text
):
    pipeline = make_pipeline([])

    with pytest.raises(InvalidInputError):
        asyncio.run(
            pipeline.translate_feedback(component_name, source_text, feedback_text)
        )

    assert pipeline.gateway.prompts == []


def test_malformed_interpretation_fails_without_retry(codegen_json):
    pipeline = make_pipeline(["this is not json", codegen_json])

    with pytest.raises(TranslationError) as exc_info:
        asyncio.run(pipeline.translate_feedback("App.tsx", SOURCE, FEEDBACK))

    assert isinstance(exc_info.value.cause, ValidationError)
    assert exc_info.value.cause.stage == "interpretation"
    assert len(pipeline.gateway.prompts) == 1


def test_invalid_change_type_fails_translation(plan_json):
    change = dict(CODEGEN_PAYLOAD["actionable_changes"][0], type="layout")
    pipeline = make_pipeline([plan_json, json.dumps({"actionable_changes": [change]})])

    with pytest.raises(TranslationError) as exc_info:
        asyncio.run(pipeline.translate_feedback("App.tsx", SOURCE, FEEDBACK))

    assert isinstance(exc_info.value.cause, ValidationError)
    assert exc_info.value.cause.stage == "code_generation"


def test_transient_errors_are_retried(plan_json, codegen_json):
    pipeline = make_pipeline(
        [ConnectionError("503"), plan_json, TimeoutError("slow"), codegen_json]
    )

    result = asyncio.run(pipeline.translate_feedback("App.tsx", SOURCE, FEEDBACK))

    assert result.confidence_percent == 90
    assert len(pipeline.gateway.prompts) == 4


def test_exhausted_retries_fail_translation():
    pipeline = make_pipeline([ConnectionError("503")] * 4, max_retries=3)

    with pytest.raises(TranslationError) as exc_info:
        asyncio.run(pipeline.translate_feedback("App.tsx", SOURCE, FEEDBACK))

    assert isinstance(exc_info.value.cause, ModelUnavailableError)
    assert len(pipeline.gateway.prompts) == 4


def test_extract_pattern():
    pipeline = make_pipeline(['{"pattern": "Make text black", "category": "Style"}'])

    assert asyncio.run(pipeline.extract_pattern("text should be black")) == "Make text black"


def test_extract_pattern_falls_back_on_bad_output():
    pipeline = make_pipeline(["no idea"])

    assert asyncio.run(pipeline.extract_pattern("text should be black")) == FALLBACK_PATTERN


def test_extract_pattern_falls_back_when_model_is_down():
    pipeline = make_pipeline([RuntimeError("down")] * 2, max_retries=1)

    assert asyncio.run(pipeline.extract_pattern("text should be black")) == FALLBACK_PATTERN


def test_extract_pattern_rejects_short_feedback():
    pipeline = make_pipeline([])

    with pytest.raises(InvalidInputError):
        asyncio.run(pipeline.extract_pattern("ok"))
