"""Leaderboard endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request

from intake_tracker.api.admin import require_api_key
from intake_tracker.domain.leaderboard import LeaderboardScore  # noqa: TC001

if TYPE_CHECKING:
    from intake_tracker.containers import AppContainer

router = APIRouter(
    prefix="/leaderboard",
    tags=["leaderboard"],
    dependencies=[Depends(require_api_key)],
)


@router.get("")
async def leaderboard(request: Request, limit: int = 10) -> dict[str, object]:
    """Return the top scores."""
    container: AppContainer = request.app.state.container
    entries = await container.leaderboard_service.top(limit)
    return {
        "users": [entry.model_dump(mode="json", by_alias=True) for entry in entries]
    }


@router.post("")
async def submit_score(
    payload: LeaderboardScore, request: Request
) -> dict[str, object]:
    """Record a user's score."""
    container: AppContainer = request.app.state.container
    entry = await container.leaderboard_service.submit(payload.username, payload.score)
    return entry.model_dump(mode="json", by_alias=True)
