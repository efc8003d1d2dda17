"""Location of the embedded JSON object in model output."""

import json
import logging
import re

from foodtrack.domain.errors import MalformedJsonError, NoJsonFoundError
from foodtrack.services.completion import MessageText, NutritionPayload, ParsedCompletion

# Greedy: first "{" through the last "}" so prose around the block is ignored.
_JSON_SPAN = re.compile(r"\{.*\}", re.DOTALL)

_logger = logging.getLogger(__name__)


def extract_candidate(parsed: ParsedCompletion) -> dict[str, object]:
    """Return the raw candidate object carried by a parsed completion."""
    if isinstance(parsed, NutritionPayload):
        return parsed.data
    return _decode_embedded_object(parsed)


def _decode_embedded_object(message: MessageText) -> dict[str, object]:
    match = _JSON_SPAN.search(message.text)
    if match is None:
        raise NoJsonFoundError("No JSON object found in model output")
    span = match.group(0)
    try:
        candidate = json.loads(span)
    except ValueError as exc:
        _logger.debug("Undecodable JSON span in model output: %s", span)
        raise MalformedJsonError("Could not parse JSON in model output") from exc
    return candidate
