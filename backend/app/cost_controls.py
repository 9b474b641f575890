"""
Tarification des modèles LLM et calcul du coût d'un appel.

Les prix sont exprimés en USD par million de jetons. Un modèle inconnu est facturé au tarif
par défaut (aligné sur GPT-4o) pour ne jamais sous-estimer le coût.
"""

# ============================================================
# Module : backend/app/cost_controls.py
# Objet  : Table de prix LLM, calcul et affichage des coûts.
# ============================================================

from __future__ import annotations

from dataclasses import dataclass

from backend.app.metrics import LLM_COST_USD, LLM_TOKENS_TOTAL

_PER_MILLION = 1_000_000


@dataclass(frozen=True)
class ModelPricing:
    """Tarif d'un modèle (USD par million de jetons)."""

    input_per_1m: float
    output_per_1m: float
    display_name: str


MODEL_PRICING: dict[str, ModelPricing] = {
    "gpt-5": ModelPricing(1.25, 10.0, "GPT-5"),
    "gpt-5-mini": ModelPricing(0.25, 2.0, "GPT-5 mini"),
    "gpt-5-nano": ModelPricing(0.05, 0.4, "GPT-5 nano"),
    "gpt-4.1": ModelPricing(2.0, 8.0, "GPT-4.1"),
    "gpt-4.1-mini": ModelPricing(0.4, 1.6, "GPT-4.1 mini"),
    "gpt-4.1-nano": ModelPricing(0.1, 0.4, "GPT-4.1 nano"),
    "gpt-4o": ModelPricing(2.5, 10.0, "GPT-4o"),
    "gpt-4o-2024-11-20": ModelPricing(2.5, 10.0, "GPT-4o"),
    "gpt-4o-2024-08-06": ModelPricing(2.5, 10.0, "GPT-4o"),
    "gpt-4o-mini": ModelPricing(0.15, 0.6, "GPT-4o mini"),
    "gpt-4o-mini-2024-07-18": ModelPricing(0.15, 0.6, "GPT-4o mini"),
    "o4-mini": ModelPricing(1.1, 4.4, "o4-mini"),
    "o3": ModelPricing(2.0, 8.0, "o3"),
    "gpt-4-turbo": ModelPricing(10.0, 30.0, "GPT-4 Turbo"),
    "gpt-3.5-turbo": ModelPricing(0.5, 1.5, "GPT-3.5 Turbo"),
}

DEFAULT_PRICING = ModelPricing(2.5, 10.0, "Unknown Model")


@dataclass(frozen=True)
class CostResult:
    """Coût détaillé d'un appel."""

    model: str
    display_name: str
    input_tokens: int
    output_tokens: int
    input_cost: float
    output_cost: float

    @property
    def total_cost(self) -> float:
        return self.input_cost + self.output_cost

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


def calculate_cost(model: str, input_tokens: int, output_tokens: int) -> CostResult:
    """Calcule le coût d'un appel à partir des totaux de jetons du fournisseur."""
    pricing = MODEL_PRICING.get(model, DEFAULT_PRICING)
    return CostResult(
        model=model,
        display_name=pricing.display_name,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        input_cost=input_tokens / _PER_MILLION * pricing.input_per_1m,
        output_cost=output_tokens / _PER_MILLION * pricing.output_per_1m,
    )


def model_display_name(model: str) -> str:
    """Nom lisible d'un modèle; le nom brut s'il est inconnu."""
    pricing = MODEL_PRICING.get(model)
    return pricing.display_name if pricing else model


def format_cost(cost: float) -> str:
    """Formate un coût en dollars ("$0.00", "<$0.0001", "$0.0042", "$1.25")."""
    if cost == 0:
        return "$0.00"
    if cost < 0.0001:
        return "<$0.0001"
    if cost < 0.01:
        return f"${cost:.4f}"
    return f"${cost:.2f}"


def record_usage(result: CostResult) -> None:
    """Cumule jetons et coût dans les compteurs Prometheus."""
    LLM_TOKENS_TOTAL.labels(model=result.model, kind="input").inc(result.input_tokens)
    LLM_TOKENS_TOTAL.labels(model=result.model, kind="output").inc(result.output_tokens)
    if result.total_cost > 0:
        LLM_COST_USD.labels(model=result.model).inc(result.total_cost)
