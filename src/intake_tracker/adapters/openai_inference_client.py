"""OpenAI chat completions client for intake inference."""

from collections.abc import AsyncIterator
from dataclasses import dataclass

from openai import AsyncOpenAI

from intake_tracker.services.inference import CompletionResult, InferenceClient


@dataclass
class OpenAIInferenceClient(InferenceClient):
    """Inference client backed by the OpenAI chat completions API."""

    client: AsyncOpenAI
    model: str
    stream: bool = False

    @classmethod
    def create(
        cls,
        api_key: str,
        model: str,
        base_url: str | None = None,
        stream: bool = False,
    ) -> "OpenAIInferenceClient":
        """Create a client, optionally against an OpenAI-compatible endpoint."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, base_url=base_url),
            model=model,
            stream=stream,
        )

    async def run(
        self, system_prompt: str, user_prompt: str
    ) -> CompletionResult | AsyncIterator[bytes]:
        """Request a completion for the intake prompt."""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        if self.stream:
            chunks = await self.client.chat.completions.create(
                model=self.model, messages=messages, stream=True
            )
            return _encode_deltas(chunks)

        response = await self.client.chat.completions.create(
            model=self.model, messages=messages
        )
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise RuntimeError("OpenAI returned an empty response")
        return CompletionResult(response=content)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()


async def _encode_deltas(chunks: AsyncIterator[object]) -> AsyncIterator[bytes]:
    async for chunk in chunks:
        choices = getattr(chunk, "choices", None) or []
        for choice in choices:
            text = getattr(choice.delta, "content", None)
            if text:
                yield text.encode("utf-8")
