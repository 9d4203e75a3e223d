"""Models for the calorie leaderboard."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LeaderboardScore(BaseModel):
    """Score submission for a user."""

    username: str = Field(min_length=1)
    score: float = Field(ge=0)


class LeaderboardEntry(BaseModel):
    """Stored leaderboard position for a user."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    score: float
    last_updated: datetime = Field(alias="lastUpdated")
