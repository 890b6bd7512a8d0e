"""Models for calorie estimation requests and results."""

import math
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BreakdownItem(BaseModel):
    """Estimated calories for one identified food item."""

    model_config = ConfigDict(strict=True)

    item: str
    calories: int | float


class CalorieEstimationDraft(BaseModel):
    """Structured estimate awaiting user confirmation."""

    model_config = ConfigDict(strict=True)

    description: str
    total_calories: int | float = Field(alias="totalCalories")
    breakdown: list[BreakdownItem]

    @field_validator("total_calories")
    @classmethod
    def _non_negative_total(cls, value: int | float) -> int | float:
        if not math.isfinite(value) or value < 0:
            raise ValueError("totalCalories must be a non-negative number")
        return value


@dataclass(frozen=True)
class TextEstimationRequest:
    """Free-text meal description."""

    content: str
    kind: str = "text"


@dataclass(frozen=True)
class ImageEstimationRequest:
    """Meal photo bytes with their MIME type."""

    data: bytes
    mime_type: str
    kind: str = "image"


EstimationRequest = TextEstimationRequest | ImageEstimationRequest
