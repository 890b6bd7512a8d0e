"""Trust boundary for calorie estimates returned by the AI service."""

import json
import logging
import re

import pydantic

from calorie_tracker.domain.estimation import CalorieEstimationDraft
from calorie_tracker.domain.results import (
    MALFORMED_PAYLOAD,
    SCHEMA_MISMATCH,
    Failure,
    InvalidResponse,
    Result,
    Success,
)

_logger = logging.getLogger(__name__)

_OPENING_FENCE = re.compile(r"^```(?:json)?[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?```$")

UNREADABLE_MESSAGE = "Could not understand the calorie estimation from the AI."


def strip_code_fence(raw_text: str) -> str:
    """Remove a surrounding Markdown code fence, if present."""
    text = raw_text.strip()
    text = _OPENING_FENCE.sub("", text, count=1)
    return _CLOSING_FENCE.sub("", text, count=1)


def validate_estimation(
    raw_text: str,
) -> Result[CalorieEstimationDraft, InvalidResponse]:
    """Parse and schema-check a raw estimation payload.

    The payload is rejected rather than repaired: wrong types, a negative
    total or a malformed breakdown all yield an ``InvalidResponse`` failure.
    """
    if not isinstance(raw_text, str):
        return Failure(InvalidResponse(UNREADABLE_MESSAGE, reason=MALFORMED_PAYLOAD))
    text = strip_code_fence(raw_text)
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        _logger.warning("Estimation payload is not JSON: %r", raw_text[:200])
        return Failure(InvalidResponse(UNREADABLE_MESSAGE, reason=MALFORMED_PAYLOAD))

    if not isinstance(parsed, dict):
        _logger.warning("Estimation payload is not an object: %r", raw_text[:200])
        return Failure(InvalidResponse(UNREADABLE_MESSAGE, reason=SCHEMA_MISMATCH))

    try:
        draft = CalorieEstimationDraft.model_validate_json(text)
    except pydantic.ValidationError as exc:
        _logger.warning(
            "Estimation payload failed schema check: errors=%s", exc.error_count()
        )
        return Failure(InvalidResponse(UNREADABLE_MESSAGE, reason=SCHEMA_MISMATCH))
    return Success(draft)
