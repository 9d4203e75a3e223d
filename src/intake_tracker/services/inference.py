"""Inference client interface and completion decoding."""

import codecs
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class CompletionResult:
    """Completion returned in one piece."""

    response: str


class InferenceClient(Protocol):
    """Interface for LLM completion endpoints."""

    async def run(
        self, system_prompt: str, user_prompt: str
    ) -> CompletionResult | AsyncIterator[bytes]:
        """Return a completion or a stream of UTF-8 encoded chunks."""


async def read_completion(result: CompletionResult | AsyncIterator[bytes]) -> str:
    """Drain a completion of either shape into one string."""
    if isinstance(result, CompletionResult):
        return result.response
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    parts = [decoder.decode(chunk) async for chunk in result]
    parts.append(decoder.decode(b"", final=True))
    return "".join(parts)


DEFAULT_GUIDELINES = """\
Estimate nutrition realistically:
- Multiply per-item values by the quantity the user mentions \
(e.g. "2 eggs" counts two eggs).
- Adjust calories for the cooking method: fried or deep-fried food carries \
extra oil, grilled, steamed and boiled food does not.
- When no portion is given, assume a typical single serving and describe it \
in "amount".
- If the user names a time or a day, use it for the date key; otherwise use \
the current date and time."""


def build_system_prompt(now: datetime, guidelines: str | None = None) -> str:
    """Build the system instruction sent with every intake prompt."""
    return f"""\
Current date is: {now.isoformat()}

You are a helpful assistant in nutrient analysis who can help users analyze \
their nutrient intake.

User will give you a list of foods they ate.

You will act like an API response and return only the following data in JSON \
format, keyed by the ISO 8601 date-time of the meal:
{{
  "<ISO date-time>": {{
    "foods": [
      {{
        "name": string,
        "calories": string,
        "protein": string,
        "carbs": string,
        "fat": string,
        "amount": string
      }}
    ],
    "summary": {{
      "calories": string,
      "protein": string,
      "carbs": string,
      "fat": string
    }}
  }}
}}

All numeric values must be decimal strings.

{guidelines or DEFAULT_GUIDELINES}
"""
