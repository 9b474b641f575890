"""
Doublures pour les tests unitaires.

`ScriptedLLM` rejoue une suite de chunks en flux et une réponse d'extraction prédéfinie, avec
injection de pannes, pour tester l'orchestrateur sans fournisseur réel.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

from backend.domain.errors import StreamFailure
from backend.infra.llm.base import LLM, ChatMessage, StreamChunk, TokenUsage


def chunks(
    *parts: str, usage: tuple[int, int] | None = (120, 40), model: str = "gpt-4o"
) -> list[StreamChunk]:
    """Deltas de texte suivis, si demandé, d'un chunk d'usage."""
    out = [StreamChunk(type="content", content=p, model=model) for p in parts]
    if usage is not None:
        prompt, completion = usage
        out.append(
            StreamChunk(
                type="usage",
                usage=TokenUsage(prompt, completion, prompt + completion),
                model=model,
            )
        )
    return out


class ScriptedLLM(LLM):
    """
    LLM factice déterministe.

    - `script`: chunks rejoués par `stream`
    - `fail_after`: lève StreamFailure après ce nombre de chunks
    - `completion` / `completion_error`: résultat de `complete`
    """

    def __init__(
        self,
        script: list[StreamChunk] | None = None,
        *,
        fail_after: int | None = None,
        completion: str = "{}",
        completion_error: Exception | None = None,
        enabled: bool = True,
    ) -> None:
        self.script = list(script or [])
        self.fail_after = fail_after
        self.completion = completion
        self.completion_error = completion_error
        self._enabled = enabled
        self.stream_calls: list[list[ChatMessage]] = []
        self.complete_calls: list[dict[str, Any]] = []
        self.streams_closed = 0

    @property
    def enabled(self) -> bool:
        return self._enabled

    def stream(
        self,
        messages: list[ChatMessage],
        *,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> AsyncIterator[StreamChunk]:
        self.stream_calls.append(messages)
        return self._replay()

    async def _replay(self) -> AsyncIterator[StreamChunk]:
        try:
            for i, chunk in enumerate(self.script):
                if self.fail_after is not None and i >= self.fail_after:
                    raise StreamFailure("upstream connection reset")
                yield chunk
            if self.fail_after is not None and self.fail_after >= len(self.script):
                raise StreamFailure("upstream connection reset")
        finally:
            self.streams_closed += 1

    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool = False,
    ) -> str:
        self.complete_calls.append(
            {"messages": messages, "model": model, "json_mode": json_mode}
        )
        if self.completion_error is not None:
            raise self.completion_error
        return self.completion
