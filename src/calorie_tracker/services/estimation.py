"""Calorie estimation service backed by an LLM collaborator."""

import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from calorie_tracker.domain.estimation import (
    CalorieEstimationDraft,
    EstimationRequest,
    ImageEstimationRequest,
    TextEstimationRequest,
)
from calorie_tracker.domain.results import (
    EstimationError,
    Failure,
    Result,
    ServiceUnavailable,
)
from calorie_tracker.services.validation import validate_estimation

_logger = logging.getLogger(__name__)

ESTIMATION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "description": {
            "type": "string",
            "description": (
                "A concise but descriptive summary of the meal identified "
                "(e.g., 'Two fried eggs with whole wheat toast')."
            ),
        },
        "totalCalories": {
            "type": "integer",
            "description": "The estimated total calorie count for the meal.",
        },
        "breakdown": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "item": {"type": "string"},
                    "calories": {"type": "integer"},
                },
                "required": ["item", "calories"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["description", "totalCalories", "breakdown"],
    "additionalProperties": False,
}

SYSTEM_INSTRUCTION = (
    "You are a nutrition expert. Analyze the user's meal from the text or image. "
    "Identify the food items, estimate their individual caloric content, and then "
    "calculate the total. Respond in valid JSON with a 'description' of the meal, "
    "the 'totalCalories', and a 'breakdown' array listing each item and its calories."
)

NOT_CONFIGURED_MESSAGE = "Calorie estimation is not configured."
FAILED_MESSAGE = "Failed to estimate calories. Please try again."


class EstimationClient(Protocol):
    """Interface for the LLM that produces raw calorie estimates."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        store: bool,
        instructions: str,
        schema: dict[str, object],
        text: str | None = None,
        image_data_url: str | None = None,
    ) -> str:
        """Return the raw text produced for a meal description or image."""


@dataclass
class EstimationService:
    """Service that calls the estimation client and validates its output."""

    client: EstimationClient | None
    model: str
    store: bool = False

    async def estimate_from_text(
        self, description: str
    ) -> Result[CalorieEstimationDraft, EstimationError]:
        """Estimate calories for a free-text meal description."""
        return await self.estimate(TextEstimationRequest(content=description))

    async def estimate_from_image(
        self, data: bytes, mime_type: str
    ) -> Result[CalorieEstimationDraft, EstimationError]:
        """Estimate calories for a meal photo."""
        request = ImageEstimationRequest(data=data, mime_type=mime_type)
        return await self.estimate(request)

    async def estimate(
        self, request: EstimationRequest
    ) -> Result[CalorieEstimationDraft, EstimationError]:
        """Run one estimation attempt; never raises for collaborator failures."""
        if self.client is None:
            _logger.warning("Estimation requested but no client is configured")
            return Failure(
                ServiceUnavailable(NOT_CONFIGURED_MESSAGE, reason="not configured")
            )

        if isinstance(request, ImageEstimationRequest):
            kwargs: dict[str, str] = {
                "image_data_url": to_data_url(request.data, request.mime_type)
            }
        else:
            kwargs = {"text": request.content}

        try:
            raw = await self.client.generate(
                model=self.model,
                store=self.store,
                instructions=SYSTEM_INSTRUCTION,
                schema=ESTIMATION_SCHEMA,
                **kwargs,
            )
        except Exception as exc:  # noqa: BLE001
            _logger.warning(
                "Estimation %s request failed (status=%s): %s",
                request.kind,
                _status_code_from_exception(exc),
                exc,
            )
            return Failure(ServiceUnavailable(FAILED_MESSAGE, reason="unreachable"))

        result = validate_estimation(raw)
        if isinstance(result, Failure):
            _logger.warning(
                "Estimation %s response rejected: %s", request.kind, result.error.reason
            )
        return result


def to_data_url(data: bytes, mime_type: str) -> str:
    """Encode image bytes as a base64 data URL."""
    encoded = base64.b64encode(data).decode("utf-8")
    return f"data:{mime_type or detect_mime_type(data)};base64,{encoded}"


def detect_mime_type(data: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    status_code = getattr(exc, "status_code", None)
    if status_code is None:
        status_code = getattr(getattr(exc, "response", None), "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
