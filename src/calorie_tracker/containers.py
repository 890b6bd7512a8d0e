"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from calorie_tracker.adapters.in_memory_store import InMemoryKeyValueStore
from calorie_tracker.adapters.openai_estimation_client import OpenAIEstimationClient
from calorie_tracker.adapters.supabase_kv_store import SupabaseKeyValueStore
from calorie_tracker.app_logging import configure_logging
from calorie_tracker.config import Settings
from calorie_tracker.services.estimation import EstimationService
from calorie_tracker.services.ledger import KeyValueStore, LedgerStore
from calorie_tracker.services.profile import ProfileStore
from calorie_tracker.services.stats import StatsService
from calorie_tracker.services.workflow import ConfirmationWorkflow


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: KeyValueStore
    profile_store: ProfileStore
    ledger: LedgerStore
    estimation_service: EstimationService
    stats_service: StatsService
    workflow: ConfirmationWorkflow
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None, store: KeyValueStore | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    resolved_store = store or _build_store(resolved_settings)

    estimation_client = None
    if resolved_settings.estimation_configured:
        estimation_client = OpenAIEstimationClient.create(
            resolved_settings.openai_api_key or "",
            timeout_seconds=resolved_settings.openai_timeout_seconds,
        )
    estimation_service = EstimationService(
        client=estimation_client,
        model=resolved_settings.openai_model,
        store=resolved_settings.openai_store,
    )
    ledger = LedgerStore(resolved_store, timezone_name=resolved_settings.timezone)
    profile_store = ProfileStore(resolved_store)

    async def close_resources() -> None:
        if estimation_client is not None:
            await estimation_client.close()

    return AppContainer(
        settings=resolved_settings,
        store=resolved_store,
        profile_store=profile_store,
        ledger=ledger,
        estimation_service=estimation_service,
        stats_service=StatsService(ledger),
        workflow=ConfirmationWorkflow(estimation_service, ledger),
        close_resources=close_resources,
    )


def _build_store(settings: Settings) -> KeyValueStore:
    if settings.supabase_configured:
        client = create_client(
            settings.supabase_url or "", settings.supabase_service_key or ""
        )
        return SupabaseKeyValueStore(client, table=settings.supabase_table)
    return InMemoryKeyValueStore()
