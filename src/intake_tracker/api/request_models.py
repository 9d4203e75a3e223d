"""Pydantic models for API request payloads."""

from pydantic import BaseModel, ConfigDict, Field


class IntakePrompt(BaseModel):
    """Free-text meal description from a user."""

    model_config = ConfigDict(populate_by_name=True)

    user_name: str = Field(min_length=1, alias="userName")
    prompt: str = Field(min_length=1)


class RelayMessage(BaseModel):
    """Message posted for delivery to relay clients."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str
    client_id: str | None = Field(default=None, alias="clientId")
    message: str | None = None
