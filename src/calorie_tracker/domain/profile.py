"""Domain models for the user profile and activity levels."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Gender(str, Enum):
    """Biological sex used by the metabolic-rate formula."""

    MALE = "male"
    FEMALE = "female"


class ActivityLevel(str, Enum):
    """Self-reported daily activity level."""

    SEDENTARY = "Sedentary"
    LIGHTLY_ACTIVE = "LightlyActive"
    MODERATELY_ACTIVE = "ModeratelyActive"
    VERY_ACTIVE = "VeryActive"
    EXTRA_ACTIVE = "ExtraActive"


class UserProfile(BaseModel):
    """Body metrics captured at onboarding (metric units)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    age: int = Field(gt=0)
    gender: Gender
    weight: float = Field(gt=0, description="Body weight in kg")
    height: float = Field(gt=0, description="Height in cm")
    onboarding_complete: bool = Field(default=False, alias="onboardingComplete")
