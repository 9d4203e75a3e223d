"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from intake_tracker.adapters.openai_inference_client import OpenAIInferenceClient
from intake_tracker.adapters.supabase_kv_store import SupabaseKeyValueStore
from intake_tracker.adapters.workers_ai_client import WorkersAiInferenceClient
from intake_tracker.config import Settings
from intake_tracker.services.intake import IntakeService
from intake_tracker.services.leaderboard import LeaderboardService
from intake_tracker.services.relay import RelayHub
from intake_tracker.services.store import InMemoryKeyValueStore, KeyValueStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: KeyValueStore
    intake_service: IntakeService
    leaderboard_service: LeaderboardService
    relay_hub: RelayHub
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = build_store(resolved_settings)
    client = build_inference_client(resolved_settings)
    intake_service = IntakeService(
        client=client,
        store=store,
        inference_timeout_seconds=resolved_settings.inference_timeout_seconds,
        meal_timezone_offset_hours=resolved_settings.meal_timezone_offset_hours,
        serialize_user_writes=resolved_settings.serialize_user_writes,
        guidelines=resolved_settings.system_prompt_guidelines,
    )

    async def close_resources() -> None:
        await client.close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        intake_service=intake_service,
        leaderboard_service=LeaderboardService(store),
        relay_hub=RelayHub(store),
        close_resources=close_resources,
    )


def build_store(settings: Settings) -> KeyValueStore:
    """Create the configured key-value store."""
    if settings.store_backend == "memory":
        return InMemoryKeyValueStore()
    if settings.store_backend == "supabase":
        if not (settings.supabase_url and settings.supabase_service_key):
            raise ValueError("Supabase store requires SUPABASE_URL and key")
        supabase_client = create_client(
            settings.supabase_url, settings.supabase_service_key
        )
        return SupabaseKeyValueStore(supabase_client, table=settings.supabase_kv_table)
    raise ValueError(f"Unknown store backend: {settings.store_backend}")


def build_inference_client(
    settings: Settings,
) -> OpenAIInferenceClient | WorkersAiInferenceClient:
    """Create the configured inference client."""
    if settings.inference_provider == "openai":
        if not settings.openai_api_key:
            raise ValueError("OpenAI inference requires OPENAI_API_KEY")
        return OpenAIInferenceClient.create(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            stream=settings.inference_stream,
        )
    if settings.inference_provider == "workers_ai":
        if not (settings.workers_ai_account_id and settings.workers_ai_api_token):
            raise ValueError("Workers AI inference requires account id and token")
        return WorkersAiInferenceClient.create(
            account_id=settings.workers_ai_account_id,
            api_token=settings.workers_ai_api_token,
            model=settings.workers_ai_model,
            stream=settings.inference_stream,
        )
    raise ValueError(f"Unknown inference provider: {settings.inference_provider}")
