"""Tests for the leaderboard service."""

import asyncio

import pytest
from pydantic import ValidationError

from intake_tracker.domain.leaderboard import LeaderboardScore
from intake_tracker.services.leaderboard import LeaderboardService
from intake_tracker.services.store import InMemoryKeyValueStore


def test_top_orders_by_score(store: InMemoryKeyValueStore) -> None:
    service = LeaderboardService(store)
    asyncio.run(service.submit("alice", 1800))
    asyncio.run(service.submit("bob", 2400))
    asyncio.run(service.submit("carol", 2000))

    top = asyncio.run(service.top(limit=2))

    assert [entry.username for entry in top] == ["bob", "carol"]


def test_resubmit_keeps_id_and_updates_score(store: InMemoryKeyValueStore) -> None:
    service = LeaderboardService(store)
    first = asyncio.run(service.submit("alice", 1800))

    second = asyncio.run(service.submit("alice", 1900))

    assert second.id == first.id
    assert asyncio.run(service.top())[0].score == 1900


def test_malformed_entries_are_skipped(store: InMemoryKeyValueStore) -> None:
    service = LeaderboardService(store)
    asyncio.run(store.put("leaderboard:ghost", "not json"))
    asyncio.run(service.submit("alice", 10))

    assert [entry.username for entry in asyncio.run(service.top())] == ["alice"]


def test_score_validation() -> None:
    with pytest.raises(ValidationError):
        LeaderboardScore(username="", score=10)
    with pytest.raises(ValidationError):
        LeaderboardScore(username="alice", score=-1)
