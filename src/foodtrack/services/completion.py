"""Decoding of chat-completion response bodies into message text."""

import json
import logging
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from foodtrack.domain.errors import NoExtractableTextError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MessageText:
    """Free text produced by the model, possibly wrapping a JSON object."""

    text: str


@dataclass(frozen=True)
class NutritionPayload:
    """A nutrition object returned directly, without an envelope."""

    data: dict[str, object]


ParsedCompletion = MessageText | NutritionPayload


class ContentPart(BaseModel):
    """One part of a multi-part message content."""

    model_config = ConfigDict(extra="ignore")

    type: str | None = None
    text: object | None = None


class ChoiceMessage(BaseModel):
    """Message wrapped by a completion choice."""

    model_config = ConfigDict(extra="ignore")

    content: str | list[str | ContentPart] | None = None


class Choice(BaseModel):
    """A single completion choice."""

    model_config = ConfigDict(extra="ignore")

    message: ChoiceMessage | None = None
    text: str | None = None


class CompletionEnvelope(BaseModel):
    """Chat-completion response envelope."""

    model_config = ConfigDict(extra="ignore")

    choices: list[Choice] = Field(min_length=1)


@dataclass(frozen=True)
class PlainTextBody:
    text: str


@dataclass(frozen=True)
class JsonStringBody:
    text: str


@dataclass(frozen=True)
class StringContentEnvelope:
    content: str


@dataclass(frozen=True)
class PartsContentEnvelope:
    parts: list[str]


@dataclass(frozen=True)
class ChoiceTextEnvelope:
    text: str


@dataclass(frozen=True)
class BareNutritionObject:
    data: dict[str, object]


@dataclass(frozen=True)
class UnrecognizedBody:
    pass


CompletionBody = (
    PlainTextBody
    | JsonStringBody
    | StringContentEnvelope
    | PartsContentEnvelope
    | ChoiceTextEnvelope
    | BareNutritionObject
    | UnrecognizedBody
)


def parse_completion(body: str) -> ParsedCompletion:
    """Reduce a raw completion response body to message text or a payload."""
    match classify_body(body):
        case PlainTextBody(text=text) | JsonStringBody(text=text):
            return MessageText(text)
        case StringContentEnvelope(content=content):
            return MessageText(content)
        case PartsContentEnvelope(parts=parts):
            return MessageText(" ".join(parts))
        case ChoiceTextEnvelope(text=text):
            return MessageText(text)
        case BareNutritionObject(data=data):
            return NutritionPayload(data)
        case UnrecognizedBody():
            _logger.debug("No extractable text in completion body: %s", body)
            raise NoExtractableTextError("Completion response has no message text")


def classify_body(body: str) -> CompletionBody:
    """Match a raw response body against the known envelope variants."""
    try:
        document = json.loads(body)
    except ValueError:
        return PlainTextBody(body)

    if isinstance(document, str):
        return JsonStringBody(document)
    if not isinstance(document, dict):
        return UnrecognizedBody()

    variant = _classify_envelope(document)
    if variant is not None:
        return variant
    if _is_nutrition_shape(document):
        return BareNutritionObject(document)
    return UnrecognizedBody()


def _classify_envelope(document: dict[str, object]) -> CompletionBody | None:
    try:
        envelope = CompletionEnvelope.model_validate(document)
    except PydanticValidationError:
        return None

    choice = envelope.choices[0]
    content = choice.message.content if choice.message else None
    if isinstance(content, str):
        return StringContentEnvelope(content)
    if isinstance(content, list):
        parts = [_part_text(part) for part in content]
        texts = [text for text in parts if text is not None]
        if texts:
            return PartsContentEnvelope(texts)
    if choice.text is not None:
        return ChoiceTextEnvelope(choice.text)
    return None


def _part_text(part: str | ContentPart) -> str | None:
    if isinstance(part, str):
        return part
    if isinstance(part.text, str):
        return part.text
    return None


def _is_nutrition_shape(document: dict[str, object]) -> bool:
    return "name" in document and document.get("calories") is not None
