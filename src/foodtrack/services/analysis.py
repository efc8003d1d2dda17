"""Meal analysis through a chat-completion provider."""

import base64
import logging
from dataclasses import dataclass, field
from typing import Protocol

from foodtrack.domain.meals import MealSource, NutritionRecord
from foodtrack.services.completion import parse_completion
from foodtrack.services.extraction import extract_candidate
from foodtrack.services.nutrition import NutritionNormalizer

_RESPONSE_SHAPE = (
    '{"name": "food name", "calories": number, "protein": number, '
    '"carbs": number, "fats": number}'
)

PHOTO_PROMPT = (
    "Analyze this food image and provide nutritional information. "
    f"Return ONLY a JSON object with this exact structure: {_RESPONSE_SHAPE}. "
    "Estimate realistic values based on visible portion size."
)

_logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    """Interface for chat-completion calls."""

    async def complete(self, payload: dict[str, object]) -> str:
        """Send a completion request and return the raw response body.

        Raises ``TransportError`` when the request fails or the provider
        answers with a non-success status.
        """


def description_prompt(description: str) -> str:
    """Build the prompt for a free-text meal description."""
    return (
        "Analyze this food description and provide nutritional information: "
        f'"{description}". '
        f"Return ONLY a JSON object with this exact structure: {_RESPONSE_SHAPE}. "
        "Estimate realistic values based on typical portions."
    )


def build_request(
    prompt: str, model: str | None = None, image_data_url: str | None = None
) -> dict[str, object]:
    """Build a chat-completion request with an optional image part."""
    content: list[dict[str, object]] = []
    if image_data_url:
        content.append({"type": "image_url", "image_url": {"url": image_data_url}})
    content.append({"type": "text", "text": prompt})
    payload: dict[str, object] = {"messages": [{"role": "user", "content": content}]}
    if model:
        payload["model"] = model
    return payload


@dataclass
class AnalysisService:
    """Service that asks the model for nutrition facts and normalizes them."""

    client: CompletionClient
    model: str | None
    normalizer: NutritionNormalizer = field(default_factory=NutritionNormalizer)

    async def analyze_photo(
        self, image_bytes: bytes, content_type: str | None = None
    ) -> NutritionRecord:
        """Estimate nutrition for a meal photo."""
        data_url = to_data_url(image_bytes, content_type)
        request = build_request(PHOTO_PROMPT, self.model, data_url)
        return await self._analyze(request, MealSource.PHOTO)

    async def analyze_description(self, description: str) -> NutritionRecord:
        """Estimate nutrition for a free-text meal description."""
        request = build_request(description_prompt(description), self.model)
        return await self._analyze(request, MealSource.MANUAL)

    async def _analyze(
        self, request: dict[str, object], source: MealSource
    ) -> NutritionRecord:
        body = await self.client.complete(request)
        candidate = extract_candidate(parse_completion(body))
        record = self.normalizer.normalize(candidate, source)
        _logger.info(
            "Analyzed %s meal: %s (%.0f kcal)", source, record.name, record.calories
        )
        return record


def to_data_url(image_bytes: bytes, content_type: str | None = None) -> str:
    """Convert bytes to a base64 data URL for image input."""
    if content_type and content_type.startswith("image/"):
        mime_type = content_type
    else:
        mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[:6] in {b"GIF87a", b"GIF89a"}:
        return "image/gif"
    return "image/jpeg"
