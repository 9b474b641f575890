"""Tests du catalogue d'étapes de l'onboarding."""

from backend.domain.brand_fields import BrandField
from backend.domain.onboarding_steps import (
    DEFAULT_STEP_CATALOG,
    OnboardingStep,
    StepCatalog,
    StepConfig,
)

EXPECTED_STEPS = 10


def test_default_catalog_order() -> None:
    catalog = DEFAULT_STEP_CATALOG
    assert len(catalog) == EXPECTED_STEPS
    assert catalog.first.id == "welcome"
    assert catalog.last.id == "complete"
    assert catalog.ids == tuple(step.value for step in OnboardingStep)


def test_next_and_previous() -> None:
    catalog = DEFAULT_STEP_CATALOG
    assert catalog.next_step("welcome") == "brand_assessment"
    assert catalog.next_step("style_guide") == "complete"
    assert catalog.next_step("complete") is None
    assert catalog.previous_step("brand_assessment") == "welcome"
    assert catalog.previous_step("welcome") is None


def test_unknown_step() -> None:
    catalog = DEFAULT_STEP_CATALOG
    assert catalog.get_step("nope") is None
    assert catalog.next_step("nope") is None
    assert catalog.previous_step("nope") is None
    assert catalog.progress_percent("nope") == 0
    assert catalog.is_terminal("nope") is False


def test_progress_percent() -> None:
    catalog = DEFAULT_STEP_CATALOG
    assert catalog.progress_percent("welcome") == 0
    assert catalog.progress_percent("brand_identity") == 22
    assert catalog.progress_percent("visual_identity") == 56
    assert catalog.progress_percent("complete") == 100


def test_single_step_catalog_progress() -> None:
    only = StepConfig(
        id="only", title="Only", description="", prompt_template="", extractable_fields=()
    )
    catalog = StepCatalog([only])
    assert catalog.progress_percent("only") == 0
    assert catalog.is_terminal("only") is True


def test_step_fields() -> None:
    step = DEFAULT_STEP_CATALOG.get_step("visual_identity")
    assert step.title == "Visual Identity"
    assert BrandField.PRIMARY_COLOR in step.extractable_fields
    assert DEFAULT_STEP_CATALOG.get_step("complete").extractable_fields == ()
