"""Shared test fixtures."""

import asyncio
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from calorie_tracker.adapters.in_memory_store import InMemoryKeyValueStore
from calorie_tracker.config import Settings
from calorie_tracker.domain.profile import Gender, UserProfile
from calorie_tracker.services.estimation import EstimationClient, EstimationService
from calorie_tracker.services.ledger import LedgerStore
from calorie_tracker.services.workflow import ConfirmationWorkflow

TODAY = "2024-01-02"

DEFAULT_PAYLOAD = json.dumps(
    {
        "description": "Two fried eggs with toast",
        "totalCalories": 380,
        "breakdown": [
            {"item": "Fried egg", "calories": 90},
            {"item": "Fried egg", "calories": 90},
            {"item": "Toast", "calories": 200},
        ],
    }
)


def fixed_clock() -> datetime:
    return datetime(2024, 1, 2, 12, 30, tzinfo=UTC)


@dataclass
class FakeEstimationClient(EstimationClient):
    """Fake estimation client returning a fixed raw payload."""

    payload: str = DEFAULT_PAYLOAD
    calls: list[dict[str, object]] = field(default_factory=list)

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
        self.calls.append(
            {"model": model, "text": text, "image_data_url": image_data_url}
        )
        return self.payload


@dataclass
class FailingEstimationClient(EstimationClient):
    """Fake estimation client that always raises."""

    calls: int = 0

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
        self.calls += 1
        raise RuntimeError("connection reset")


@dataclass
class BlockingEstimationClient(EstimationClient):
    """Fake estimation client that waits until released."""

    payload: str = DEFAULT_PAYLOAD
    release: asyncio.Event | None = None
    calls: int = 0

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
        self.calls += 1
        if self.release is not None:
            await self.release.wait()
        return self.payload


def build_workflow(
    client: EstimationClient | None = None,
) -> tuple[ConfirmationWorkflow, LedgerStore]:
    ledger = LedgerStore(InMemoryKeyValueStore(), clock=fixed_clock)
    service = EstimationService(
        client=client if client is not None else FakeEstimationClient(),
        model="gpt-4.1-mini",
    )
    return ConfirmationWorkflow(service, ledger), ledger


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openai_api_key="openai-key",
        supabase_url=None,
        supabase_service_key=None,
    )


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def ledger(store: InMemoryKeyValueStore) -> LedgerStore:
    return LedgerStore(store, clock=fixed_clock)


@pytest.fixture
def male_profile() -> UserProfile:
    return UserProfile(name="Alex", age=30, gender=Gender.MALE, weight=75, height=180)
