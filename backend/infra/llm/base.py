"""Interface de base pour les modèles de langage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any, Literal

# Message au format chat: {"role": ..., "content": str | list[part]}
ChatMessage = dict[str, Any]


@dataclass
class TokenUsage:
    """Totaux de jetons rapportés par le fournisseur."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class StreamChunk:
    """Élément du flux: un delta de texte ou le décompte final d'usage."""

    type: Literal["content", "usage"]
    content: str = ""
    usage: TokenUsage | None = None
    model: str | None = None


class LLM(ABC):
    """Interface abstraite pour les modèles de langage."""

    @property
    def enabled(self) -> bool:
        """Vrai si un fournisseur est configuré et utilisable."""
        return True

    @abstractmethod
    def stream(
        self,
        messages: list[ChatMessage],
        *,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> AsyncIterator[StreamChunk]:
        """Génère une réponse en flux: deltas de texte puis, au plus, un chunk d'usage.

        Lève StreamFailure si la génération échoue une fois le flux commencé.
        """
        ...

    @abstractmethod
    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool = False,
    ) -> str:
        """Génère une réponse complète en un appel (optionnellement contrainte en JSON)."""
        ...
