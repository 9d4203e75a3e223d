"""Shared test fixtures."""

import pytest

from intake_tracker.config import Settings
from intake_tracker.containers import AppContainer
from intake_tracker.services.intake import IntakeService
from intake_tracker.services.leaderboard import LeaderboardService
from intake_tracker.services.relay import RelayHub
from intake_tracker.services.store import InMemoryKeyValueStore
from tests.fakes import BREAKFAST_KEY, FakeInferenceClient, food, fragment_text


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_secret="api-secret",
        admin_token="admin-token",
        openai_api_key="openai-key",
        environment="test",
    )


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def inference_client() -> FakeInferenceClient:
    return FakeInferenceClient(
        responses=[
            "Here is the analysis:\n```json\n"
            + fragment_text(BREAKFAST_KEY, [food("Egg", "78", "6", "0.6", "5")])
            + "\n```"
        ]
    )


@pytest.fixture
def intake_service(
    inference_client: FakeInferenceClient, store: InMemoryKeyValueStore
) -> IntakeService:
    return IntakeService(client=inference_client, store=store)


@pytest.fixture
def container(
    settings: Settings,
    store: InMemoryKeyValueStore,
    intake_service: IntakeService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        store=store,
        intake_service=intake_service,
        leaderboard_service=LeaderboardService(store),
        relay_hub=RelayHub(store),
        close_resources=close_resources,
    )
