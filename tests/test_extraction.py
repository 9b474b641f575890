"""Tests de l'extraction structurée des champs de marque."""

from __future__ import annotations

import pytest

from backend.domain.errors import ExtractionFailure
from backend.domain.extraction import (
    ExtractionService,
    build_extraction_prompt,
    parse_extraction_response,
)
from backend.domain.onboarding_steps import DEFAULT_STEP_CATALOG
from tests.fakes import ScriptedLLM

TRANSCRIPT = [
    {"role": "user", "content": "We are called Nova Labs and we bake sourdough."},
    {"role": "assistant", "content": "Nova Labs it is! Tell me about your customers."},
]


def test_parse_plain_object_keeps_known_fields() -> None:
    parsed = parse_extraction_response(
        '{"brandName": "Nova Labs", "industry": "Bakery", "favouriteFood": "pizza"}'
    )
    assert parsed == {"brandName": "Nova Labs", "industry": "Bakery"}


def test_parse_code_fenced_json() -> None:
    text = '```json\n{"brandValues": ["Craft", "Honesty"]}\n```'
    assert parse_extraction_response(text) == {"brandValues": ["Craft", "Honesty"]}


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        None,
        "not json",
        "[1, 2]",
        "{}",
        '{"favouriteFood": "x", "unknownField": "y"}',
        '{"tagline": "  ", "industry": null}',
    ],
)
def test_parse_unusable_responses(text) -> None:
    assert parse_extraction_response(text) is None


def test_prompt_lists_step_fields_and_transcript() -> None:
    prompt = build_extraction_prompt(DEFAULT_STEP_CATALOG, "target_audience", TRANSCRIPT)
    assert "- brandName" in prompt
    assert "- targetAudience" in prompt
    assert "- customerPainPoints" in prompt
    assert "- tagline" not in prompt
    assert "USER: We are called Nova Labs and we bake sourdough." in prompt
    assert "ASSISTANT: Nova Labs it is!" in prompt


def test_prompt_empty_for_terminal_or_unknown_step() -> None:
    assert build_extraction_prompt(DEFAULT_STEP_CATALOG, "complete", TRANSCRIPT) == ""
    assert build_extraction_prompt(DEFAULT_STEP_CATALOG, "nope", TRANSCRIPT) == ""


@pytest.mark.asyncio
async def test_service_returns_filtered_fields() -> None:
    llm = ScriptedLLM(completion='{"brandName": "Nova Labs"}')
    service = ExtractionService(llm, DEFAULT_STEP_CATALOG, model="gpt-4o-mini")

    result = await service.extract("brand_identity", TRANSCRIPT)

    assert result == {"brandName": "Nova Labs"}
    call = llm.complete_calls[0]
    assert call["json_mode"] is True
    assert call["model"] == "gpt-4o-mini"
    assert call["messages"][0]["role"] == "system"


@pytest.mark.asyncio
async def test_service_skips_terminal_step() -> None:
    llm = ScriptedLLM(completion='{"brandName": "Nova Labs"}')
    service = ExtractionService(llm, DEFAULT_STEP_CATALOG)

    assert await service.extract("complete", TRANSCRIPT) is None
    assert llm.complete_calls == []


@pytest.mark.asyncio
async def test_service_wraps_transport_errors() -> None:
    llm = ScriptedLLM(completion_error=ConnectionError("connection refused"))
    service = ExtractionService(llm, DEFAULT_STEP_CATALOG)

    with pytest.raises(ExtractionFailure):
        await service.extract("brand_identity", TRANSCRIPT)
