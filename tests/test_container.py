"""Tests for container wiring."""

import asyncio

import pytest

from intake_tracker.adapters.openai_inference_client import OpenAIInferenceClient
from intake_tracker.adapters.workers_ai_client import WorkersAiInferenceClient
from intake_tracker.config import Settings, parse_month
from intake_tracker.containers import build_container, build_inference_client
from intake_tracker.services.store import InMemoryKeyValueStore


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)

    assert isinstance(container.store, InMemoryKeyValueStore)
    assert container.intake_service.store is container.store
    assert container.relay_hub.store is container.store
    assert isinstance(container.intake_service.client, OpenAIInferenceClient)
    asyncio.run(container.close_resources())


def test_build_workers_ai_client(settings: Settings) -> None:
    workers = settings.model_copy(
        update={
            "inference_provider": "workers_ai",
            "workers_ai_account_id": "acct",
            "workers_ai_api_token": "token",
        }
    )

    client = build_inference_client(workers)

    assert isinstance(client, WorkersAiInferenceClient)
    asyncio.run(client.close())


def test_unknown_backends_are_rejected(settings: Settings) -> None:
    with pytest.raises(ValueError, match="store backend"):
        build_container(settings.model_copy(update={"store_backend": "redis"}))
    with pytest.raises(ValueError, match="inference provider"):
        build_inference_client(
            settings.model_copy(update={"inference_provider": "local"})
        )


def test_supabase_backend_requires_credentials(settings: Settings) -> None:
    with pytest.raises(ValueError, match="Supabase"):
        build_container(settings.model_copy(update={"store_backend": "supabase"}))


def test_parse_month() -> None:
    assert parse_month("2024-05") == (2024, 5)
    assert parse_month(None) is None
    with pytest.raises(ValueError):
        parse_month("2024-13")
    with pytest.raises(ValueError):
        parse_month("May")
