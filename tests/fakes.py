"""Test doubles and payload builders."""

import json
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from intake_tracker.services.inference import CompletionResult, InferenceClient

BREAKFAST_KEY = "2024-05-15T00:30:00.000Z"


def food(  # noqa: PLR0913
    name: str,
    calories: str,
    protein: str = "0",
    carbs: str = "0",
    fat: str = "0",
    amount: str = "1 serving",
) -> dict[str, str]:
    """Build a wire-format food entry."""
    return {
        "name": name,
        "calories": calories,
        "protein": protein,
        "carbs": carbs,
        "fat": fat,
        "amount": amount,
    }


def fragment_text(date_key: str, foods: list[dict[str, str]]) -> str:
    """Build a completion body holding one date-key."""
    return json.dumps(
        {
            date_key: {
                "foods": foods,
                "summary": {"calories": "0", "protein": "0", "carbs": "0", "fat": "0"},
            }
        }
    )


@dataclass
class FakeInferenceClient(InferenceClient):
    """Fake inference client returning queued completions."""

    responses: list[str] = field(default_factory=list)
    stream: bool = False
    calls: list[tuple[str, str]] = field(default_factory=list)
    closed: bool = False

    async def run(
        self, system_prompt: str, user_prompt: str
    ) -> CompletionResult | AsyncIterator[bytes]:
        self.calls.append((system_prompt, user_prompt))
        text = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if self.stream:
            return _chunked(text.encode("utf-8"))
        return CompletionResult(response=text)

    async def close(self) -> None:
        self.closed = True


async def _chunked(data: bytes, size: int = 7) -> AsyncIterator[bytes]:
    for start in range(0, len(data), size):
        yield data[start : start + size]


@dataclass
class FakeSocket:
    """Fake WebSocket recording sent frames."""

    sent: list[dict[str, object]] = field(default_factory=list)
    accepted: bool = False

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, data: str) -> None:
        self.sent.append(json.loads(data))
