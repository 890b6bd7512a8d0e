"""Energy expenditure (BMR/TDEE) calculations."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from calorie_tracker.domain.profile import ActivityLevel, Gender, UserProfile

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
    ActivityLevel.EXTRA_ACTIVE: 1.9,
}


@dataclass(frozen=True)
class ActivityInfo:
    """Human-readable guidance for choosing an activity level."""

    description: str
    example: str


ACTIVITY_INFO: dict[ActivityLevel, ActivityInfo] = {
    ActivityLevel.SEDENTARY: ActivityInfo(
        "Little to no exercise.",
        "You spend most of the day sitting (e.g., desk job, driving).",
    ),
    ActivityLevel.LIGHTLY_ACTIVE: ActivityInfo(
        "Light exercise or sports 1-3 days/week.",
        "e.g., walking for 30-60 mins, light jogging, yoga.",
    ),
    ActivityLevel.MODERATELY_ACTIVE: ActivityInfo(
        "Moderate exercise or sports 3-5 days/week.",
        "e.g., running, cycling, swimming for an hour.",
    ),
    ActivityLevel.VERY_ACTIVE: ActivityInfo(
        "Hard exercise or sports 6-7 days a week.",
        "e.g., intense weightlifting, HIIT, team sports practice.",
    ),
    ActivityLevel.EXTRA_ACTIVE: ActivityInfo(
        "Very hard exercise/sports & a physical job.",
        "e.g., construction worker, professional athlete, marathon training.",
    ),
}


def compute_bmr(profile: UserProfile) -> float:
    """Return basal metabolic rate using the Mifflin-St Jeor equation."""
    base = 10.0 * profile.weight + 6.25 * profile.height - 5.0 * profile.age
    if profile.gender == Gender.MALE:
        return base + 5
    return base - 161


def compute_burned(profile: UserProfile, level: ActivityLevel) -> int:
    """Return total daily energy expenditure for a profile and activity level."""
    bmr = compute_bmr(profile)
    return round_half_up(bmr * ACTIVITY_MULTIPLIERS[ActivityLevel(level)])


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    # Shortest decimal form of the float, so 0.5 boundaries round as written.
    return int(Decimal(repr(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))
