"""
Client LLM basé sur l'API OpenAI (SDK asynchrone).

Implémente l'interface LLM en supportant:
- chat.completions en flux, avec le décompte d'usage final (`stream_options.include_usage`)
- chat.completions en un appel, avec mode JSON optionnel (extraction)

Sans clé API le client est désactivé (`enabled` faux) et tout appel lève ServiceUnavailable.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import openai
from openai import AsyncOpenAI

from backend.domain.errors import ServiceUnavailable, StreamFailure
from backend.infra.llm.base import LLM, ChatMessage, StreamChunk, TokenUsage


def _usage_from(raw: Any) -> TokenUsage:
    """Extrait les infos d'usage depuis la réponse OpenAI (toujours un TokenUsage)."""
    if raw is None:
        return TokenUsage()
    return TokenUsage(
        prompt_tokens=int(getattr(raw, "prompt_tokens", 0) or 0),
        completion_tokens=int(getattr(raw, "completion_tokens", 0) or 0),
        total_tokens=int(getattr(raw, "total_tokens", 0) or 0),
    )


class OpenAILLM(LLM):
    """LLM basé sur OpenAI."""

    def __init__(self, api_key: str | None = None, client: AsyncOpenAI | None = None) -> None:
        """Initialize the OpenAILLM client."""
        if client is not None:
            self.client: AsyncOpenAI | None = client
        elif api_key:
            self.client = AsyncOpenAI(api_key=api_key)
        else:
            self.client = None

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def _require_client(self) -> AsyncOpenAI:
        if self.client is None:
            raise ServiceUnavailable("Text generation is not configured")
        return self.client

    async def stream(
        self,
        messages: list[ChatMessage],
        *,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> AsyncIterator[StreamChunk]:
        client = self._require_client()
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                stream=True,
                stream_options={"include_usage": True},
            )
        except openai.OpenAIError as exc:
            raise StreamFailure(str(exc)) from exc

        try:
            async for chunk in response:
                if chunk.choices:
                    delta = chunk.choices[0].delta
                    text = getattr(delta, "content", None)
                    if text:
                        yield StreamChunk(type="content", content=text, model=chunk.model)
                # Le dernier chunk porte l'usage, avec une liste de choix vide
                if getattr(chunk, "usage", None) is not None:
                    yield StreamChunk(
                        type="usage", usage=_usage_from(chunk.usage), model=chunk.model
                    )
        except openai.OpenAIError as exc:
            raise StreamFailure(str(exc)) from exc
        finally:
            await response.close()

    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool = False,
    ) -> str:
        client = self._require_client()
        kwargs: dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        resp = await client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )
        # Réponse sans choix (filtrage, incident fournisseur): traitée comme vide
        choice = resp.choices[0] if resp.choices else None
        content = getattr(getattr(choice, "message", None), "content", None)
        return str(content or "")
