"""Tests for completion response parsing."""

import json

import pytest

from foodtrack.domain.errors import NoExtractableTextError
from foodtrack.services.completion import (
    BareNutritionObject,
    ChoiceTextEnvelope,
    MessageText,
    NutritionPayload,
    PartsContentEnvelope,
    PlainTextBody,
    StringContentEnvelope,
    classify_body,
    parse_completion,
)
from tests.conftest import APPLE, chat_completion


def test_string_content_is_used_verbatim() -> None:
    body = chat_completion("Here you go: {\"name\": \"Apple\"} enjoy")

    assert parse_completion(body) == MessageText('Here you go: {"name": "Apple"} enjoy')


def test_parts_content_joins_text_parts_with_space() -> None:
    body = chat_completion(
        [
            {"type": "text", "text": "Estimate:"},
            {"type": "image_url", "image_url": {"url": "data:image/png;base64,AA=="}},
            "raw part",
            {"type": "text", "text": '{"name": "Apple"}'},
        ]
    )

    assert isinstance(classify_body(body), PartsContentEnvelope)
    assert parse_completion(body) == MessageText('Estimate: raw part {"name": "Apple"}')


def test_choice_text_is_used_when_message_missing() -> None:
    body = json.dumps({"choices": [{"text": "legacy completion"}]})

    assert isinstance(classify_body(body), ChoiceTextEnvelope)
    assert parse_completion(body) == MessageText("legacy completion")


def test_bare_nutrition_object_short_circuits() -> None:
    body = json.dumps(APPLE)

    assert isinstance(classify_body(body), BareNutritionObject)
    assert parse_completion(body) == NutritionPayload(APPLE)


def test_choices_take_precedence_over_top_level_shape() -> None:
    body = json.dumps(
        {
            "name": "Envelope",
            "calories": 1,
            "choices": [{"message": {"content": "inner"}}],
        }
    )

    assert isinstance(classify_body(body), StringContentEnvelope)
    assert parse_completion(body) == MessageText("inner")


def test_undecodable_body_is_treated_as_text() -> None:
    body = 'Sure! {"name": "Apple", "calories": 95'

    assert isinstance(classify_body(body), PlainTextBody)
    assert parse_completion(body) == MessageText(body)


def test_json_string_body_is_text() -> None:
    assert parse_completion(json.dumps("just words")) == MessageText("just words")


@pytest.mark.parametrize(
    "document",
    [
        {"choices": []},
        {"choices": [{"message": {"content": None}}]},
        {"choices": [{"message": {"content": [{"type": "image_url"}]}}]},
        {"error": {"message": "quota exceeded"}},
        {"name": "Apple", "calories": None},
        [1, 2, 3],
        42,
    ],
)
def test_unrecognized_bodies_have_no_extractable_text(document: object) -> None:
    with pytest.raises(NoExtractableTextError):
        parse_completion(json.dumps(document))


def test_empty_name_still_counts_as_nutrition_shape() -> None:
    document = {"name": "", "calories": 100, "protein": 1, "carbs": 1, "fats": 1}

    assert parse_completion(json.dumps(document)) == NutritionPayload(document)


def test_parts_with_non_string_text_are_skipped() -> None:
    body = chat_completion(
        [
            {"type": "reasoning", "text": {"steps": ["look", "guess"]}},
            {"type": "text", "text": json.dumps(APPLE)},
        ]
    )

    assert parse_completion(body) == MessageText(json.dumps(APPLE))
