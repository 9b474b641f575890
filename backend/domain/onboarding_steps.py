"""Catalogue ordonné des étapes de l'assistant d'onboarding.

Table de consultation immuable construite une fois au démarrage. Les identifiants inconnus
donnent `None` (ou 0 pour la progression) plutôt qu'une exception.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from backend.domain.brand_fields import BrandField
from backend.domain.onboarding_prompts import STEP_PROMPTS


class OnboardingStep(str, Enum):
    """Étapes de l'assistant, dans l'ordre."""

    WELCOME = "welcome"
    BRAND_ASSESSMENT = "brand_assessment"
    BRAND_IDENTITY = "brand_identity"
    TARGET_AUDIENCE = "target_audience"
    BRAND_PERSONALITY = "brand_personality"
    VISUAL_IDENTITY = "visual_identity"
    MARKET_POSITIONING = "market_positioning"
    BRAND_STORY = "brand_story"
    STYLE_GUIDE = "style_guide"
    COMPLETE = "complete"


@dataclass(frozen=True)
class StepConfig:
    """Configuration d'une étape: titre, gabarit de prompt et champs extractibles."""

    id: str
    title: str
    description: str
    prompt_template: str
    extractable_fields: tuple[BrandField, ...] = ()


class StepCatalog:
    """Séquence linéaire d'étapes avec premier et dernier élément distingués."""

    def __init__(self, steps: Iterable[StepConfig]) -> None:
        self._steps: tuple[StepConfig, ...] = tuple(steps)
        if not self._steps:
            raise ValueError("step catalog cannot be empty")
        self._index = {s.id: i for i, s in enumerate(self._steps)}

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self):
        return iter(self._steps)

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(s.id for s in self._steps)

    @property
    def first(self) -> StepConfig:
        return self._steps[0]

    @property
    def last(self) -> StepConfig:
        return self._steps[-1]

    def get_step(self, step_id: str) -> StepConfig | None:
        idx = self._index.get(step_id)
        return self._steps[idx] if idx is not None else None

    def next_step(self, step_id: str) -> str | None:
        idx = self._index.get(step_id)
        if idx is None or idx + 1 >= len(self._steps):
            return None
        return self._steps[idx + 1].id

    def previous_step(self, step_id: str) -> str | None:
        idx = self._index.get(step_id)
        if idx is None or idx == 0:
            return None
        return self._steps[idx - 1].id

    def progress_percent(self, step_id: str) -> int:
        """Pourcentage d'avancement: 0 sur la première étape, 100 sur la dernière."""
        idx = self._index.get(step_id)
        if idx is None or len(self._steps) < 2:
            return 0
        return round(100 * idx / (len(self._steps) - 1))

    def is_terminal(self, step_id: str) -> bool:
        return step_id == self.last.id


def _step(
    step: OnboardingStep, title: str, description: str, *fields: BrandField
) -> StepConfig:
    return StepConfig(
        id=step.value,
        title=title,
        description=description,
        prompt_template=STEP_PROMPTS[step.value],
        extractable_fields=tuple(fields),
    )


F = BrandField

DEFAULT_STEP_CATALOG = StepCatalog(
    [
        _step(OnboardingStep.WELCOME, "Welcome", "Introduction and brand assessment"),
        _step(
            OnboardingStep.BRAND_ASSESSMENT,
            "Brand Assessment",
            "Understanding what exists and what needs to be built",
            F.BRAND_NAME,
            F.INDUSTRY,
            F.ELEVATOR_PITCH,
        ),
        _step(
            OnboardingStep.BRAND_IDENTITY,
            "Brand Identity",
            "Defining name, mission, vision and core positioning",
            F.BRAND_NAME,
            F.TAGLINE,
            F.MISSION_STATEMENT,
            F.VISION_STATEMENT,
            F.ELEVATOR_PITCH,
        ),
        _step(
            OnboardingStep.TARGET_AUDIENCE,
            "Target Audience",
            "Identifying ideal customers",
            F.TARGET_AUDIENCE,
            F.CUSTOMER_PAIN_POINTS,
            F.VALUE_PROPOSITION,
        ),
        _step(
            OnboardingStep.BRAND_PERSONALITY,
            "Brand Personality",
            "Defining brand archetype and personality",
            F.BRAND_ARCHETYPE,
            F.BRAND_PERSONALITY_TRAITS,
            F.TONE_OF_VOICE,
            F.COMMUNICATION_STYLE,
        ),
        _step(
            OnboardingStep.VISUAL_IDENTITY,
            "Visual Identity",
            "Colors, typography and visual direction",
            F.PRIMARY_COLOR,
            F.SECONDARY_COLOR,
            F.ACCENT_COLOR,
            F.COLOR_PALETTE,
            F.TYPOGRAPHY_HEADING,
            F.TYPOGRAPHY_BODY,
            F.LOGO_CONCEPT,
        ),
        _step(
            OnboardingStep.MARKET_POSITIONING,
            "Market Position",
            "Competitive analysis and market positioning",
            F.COMPETITORS,
            F.UNIQUE_SELLING_POINTS,
            F.MARKET_POSITION,
            F.INDUSTRY,
        ),
        _step(
            OnboardingStep.BRAND_STORY,
            "Brand Story",
            "Crafting the narrative, values and brand promise",
            F.ORIGIN_STORY,
            F.BRAND_VALUES,
            F.BRAND_PROMISE,
        ),
        _step(
            OnboardingStep.STYLE_GUIDE,
            "Style Guide",
            "Generating the complete brand style guide",
            F.STYLE_GUIDE,
        ),
        _step(OnboardingStep.COMPLETE, "Complete", "Onboarding complete, brand is ready"),
    ]
)
