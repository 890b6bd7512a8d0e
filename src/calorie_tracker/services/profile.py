"""User profile persistence and onboarding rules."""

import logging

import pydantic

from calorie_tracker.domain.profile import Gender, UserProfile
from calorie_tracker.domain.results import Failure, Result, Success, ValidationError
from calorie_tracker.services.ledger import KeyValueStore

_logger = logging.getLogger(__name__)

PROFILE_KEY = "userProfile"
MIN_NAME_LENGTH = 2


class ProfileStore:
    """Loads and replaces the single user profile."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._cache: UserProfile | None = None
        self._loaded = False

    def load(self) -> UserProfile | None:
        """Read the profile from the backing store."""
        raw = self._store.get(PROFILE_KEY)
        profile: UserProfile | None = None
        if isinstance(raw, dict):
            try:
                profile = UserProfile.model_validate(raw)
            except pydantic.ValidationError:
                _logger.warning("Stored profile is invalid; onboarding required")
        self._cache = profile
        self._loaded = True
        return profile

    def get(self) -> UserProfile | None:
        """Return the cached profile, loading it on first use."""
        if not self._loaded:
            return self.load()
        return self._cache

    def save(self, profile: UserProfile) -> None:
        """Replace the stored profile."""
        self._store.set(PROFILE_KEY, profile.model_dump(mode="json", by_alias=True))
        self._cache = profile
        self._loaded = True

    def clear(self) -> None:
        """Forget the profile (log out)."""
        self._store.set(PROFILE_KEY, None)
        self._cache = None
        self._loaded = True

    def invalidate(self) -> None:
        """Drop the cached profile so the next read hits the store."""
        self._loaded = False

    def needs_onboarding(self) -> bool:
        """Return True until a completed profile has been saved."""
        profile = self.get()
        return profile is None or not profile.onboarding_complete

    def complete_onboarding(  # noqa: PLR0913
        self,
        *,
        name: str,
        age: int,
        gender: str,
        weight: float,
        height: float,
    ) -> Result[UserProfile, ValidationError]:
        """Validate onboarding answers and save them as the profile."""
        if len(name.strip()) < MIN_NAME_LENGTH:
            return Failure(ValidationError("Please enter your name."))
        if gender not in {item.value for item in Gender}:
            return Failure(ValidationError("Gender must be male or female."))
        if age <= 0 or weight <= 0 or height <= 0:
            return Failure(
                ValidationError("Age, weight and height must be greater than zero.")
            )
        try:
            profile = UserProfile(
                name=name.strip(),
                age=age,
                gender=Gender(gender),
                weight=weight,
                height=height,
                onboarding_complete=True,
            )
        except pydantic.ValidationError:
            return Failure(ValidationError("Please check your profile details."))
        self.save(profile)
        _logger.info("Onboarding completed")
        return Success(profile)
