"""Tests for result models and suggestion storage format."""

import json

import pytest

from feedback_translator.core.translation.models import (
    CodeChange,
    ChangeType,
    TranslationResult,
    deserialize_changes,
    serialize_changes,
    to_percent,
)


@pytest.mark.parametrize(
    "confidence, percent",
    [(0.0, 0), (0.005, 1), (0.125, 13), (0.9, 90), (0.994, 99), (1.0, 100)],
)
def test_to_percent_rounds_half_up(confidence, percent):
    assert to_percent(confidence) == percent


def test_suggestions_are_stored_as_json_array():
    change = CodeChange(
        type=ChangeType.PROPS,
        before='<Button size="sm" />',
        after='<Button size="lg" />',
        explanation="larger button",
    )

    stored = serialize_changes([change])

    assert json.loads(stored) == [
        {
            "type": "props",
            "before": '<Button size="sm" />',
            "after": '<Button size="lg" />',
            "explanation": "larger button",
        }
    ]
    assert deserialize_changes(stored) == [change]
    assert deserialize_changes(serialize_changes([])) == []


def test_result_exposes_percent():
    result = TranslationResult(
        interpretation="x",
        actionable_changes=[],
        confidence=0.875,
        reasoning="y",
    )
    assert result.confidence_percent == 88
