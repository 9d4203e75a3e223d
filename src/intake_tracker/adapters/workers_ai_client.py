"""Cloudflare Workers AI client."""

import json
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

import httpx

from intake_tracker.services.inference import CompletionResult, InferenceClient

_logger = logging.getLogger(__name__)


@dataclass
class WorkersAiInferenceClient(InferenceClient):
    """HTTPX-backed client for the Workers AI ``ai/run`` endpoint."""

    account_id: str
    api_token: str
    model: str
    http_client: httpx.AsyncClient
    stream: bool = False
    base_url: str = "https://api.cloudflare.com/client/v4"

    @classmethod
    def create(
        cls, account_id: str, api_token: str, model: str, stream: bool = False
    ) -> "WorkersAiInferenceClient":
        """Create a Workers AI client with a managed httpx session."""
        return cls(
            account_id=account_id,
            api_token=api_token,
            model=model,
            http_client=httpx.AsyncClient(),
            stream=stream,
        )

    async def run(
        self, system_prompt: str, user_prompt: str
    ) -> CompletionResult | AsyncIterator[bytes]:
        """Run the model with a system and a user message."""
        payload: dict[str, object] = {
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        if self.stream:
            payload["stream"] = True
            return self._stream(payload)

        response = await self.http_client.post(
            self._url(), headers=self._headers(), json=payload, timeout=60
        )
        response.raise_for_status()
        body = response.json()
        result = body.get("result") or {}
        text = result.get("response")
        if not isinstance(text, str):
            raise RuntimeError("Workers AI returned no response text")
        return CompletionResult(response=text)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _stream(self, payload: dict[str, object]) -> AsyncIterator[bytes]:
        async with self.http_client.stream(
            "POST", self._url(), headers=self._headers(), json=payload, timeout=60
        ) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                text = _parse_event(line)
                if text:
                    yield text.encode("utf-8")

    def _url(self) -> str:
        return f"{self.base_url}/accounts/{self.account_id}/ai/run/{self.model}"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_token}"}


def _parse_event(line: str) -> str | None:
    """Return the text carried by one server-sent event line."""
    if not line.startswith("data:"):
        return None
    data = line.removeprefix("data:").strip()
    if not data or data == "[DONE]":
        return None
    try:
        event = json.loads(data)
    except json.JSONDecodeError:
        _logger.warning("Skipping undecodable stream event: %s", data)
        return None
    text = event.get("response") if isinstance(event, dict) else None
    return text if isinstance(text, str) else None
