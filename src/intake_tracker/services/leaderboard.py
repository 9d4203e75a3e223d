"""Calorie leaderboard backed by the key-value store."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from pydantic import ValidationError

from intake_tracker.domain.leaderboard import LeaderboardEntry
from intake_tracker.services.store import KeyValueStore

LEADERBOARD_PREFIX = "leaderboard:"

_logger = logging.getLogger(__name__)


@dataclass
class LeaderboardService:
    """Service for recording and ranking user scores."""

    store: KeyValueStore

    async def submit(self, username: str, score: float) -> LeaderboardEntry:
        """Record the latest score for a user."""
        key = f"{LEADERBOARD_PREFIX}{username}"
        current = await self._load(key)
        entry = LeaderboardEntry(
            id=current.id if current else str(uuid4()),
            username=username,
            score=score,
            last_updated=datetime.now(tz=UTC),
        )
        await self.store.put(key, entry.model_dump_json(by_alias=True))
        return entry

    async def top(self, limit: int = 10) -> list[LeaderboardEntry]:
        """Return the highest scores, best first."""
        entries = []
        for key in await self.store.list(LEADERBOARD_PREFIX):
            entry = await self._load(key)
            if entry is not None:
                entries.append(entry)
        entries.sort(key=lambda entry: (-entry.score, entry.username))
        return entries[:limit]

    async def _load(self, key: str) -> LeaderboardEntry | None:
        raw = await self.store.get(key)
        if raw is None:
            return None
        try:
            return LeaderboardEntry.model_validate_json(raw)
        except ValidationError:
            _logger.warning("Ignoring malformed leaderboard entry %s", key)
            return None
