"""Extraction structurée des champs de marque à partir d'un échange d'onboarding.

Un second appel au modèle, à basse température et en mode JSON, propose un ensemble de champs
explicitement confirmés dans la conversation. Le résultat est filtré aux champs connus; un
ensemble vide est rendu sous la forme `None`.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from typing import Any

import openai
import structlog

from backend.domain.brand_fields import (
    EXTRACTABLE_FIELDS,
    FIELD_REGISTRY,
    IDENTITY_FIELD,
    FieldKind,
)
from backend.domain.errors import ExtractionFailure
from backend.domain.onboarding_steps import StepCatalog
from backend.infra.llm.base import LLM

log = structlog.get_logger(__name__)

ExtractedFieldSet = dict[str, Any]

_CODE_FENCE = re.compile(r"^```(?:json)?\s*\n?([\s\S]*?)\n?\s*```$")
_KNOWN_FIELDS = frozenset(f.value for f in EXTRACTABLE_FIELDS)


def _content_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    return json.dumps(content, ensure_ascii=False)


def build_extraction_prompt(
    catalog: StepCatalog, step_id: str, transcript: Sequence[Mapping[str, Any]]
) -> str:
    """Prompt d'extraction pour une étape; chaîne vide pour l'étape finale ou inconnue."""
    step = catalog.get_step(step_id)
    if step is None or catalog.is_terminal(step_id):
        return ""

    fields = [IDENTITY_FIELD.value]
    for f in step.extractable_fields:
        if f.value not in fields:
            fields.append(f.value)
    array_fields = sorted(
        f.value
        for f in EXTRACTABLE_FIELDS
        if FIELD_REGISTRY[f].kind is FieldKind.LIST
    )

    lines = "\n".join(
        f"{str(m.get('role', '')).upper()}: {_content_text(m.get('content', ''))}"
        for m in transcript
    )
    wanted = "\n".join(f"- {f}" for f in fields)
    return f"""You are a data extraction assistant. Analyze the following brand onboarding \
conversation and extract any brand information that has been explicitly stated or clearly agreed \
upon by the user.

CONVERSATION:
{lines}

FIELDS TO EXTRACT (return only fields that were clearly stated or confirmed):
{wanted}

RULES:
- Return a JSON object with ONLY the fields that have definitive values from the conversation
- Do NOT guess or infer values that weren't discussed
- If the user explicitly stated a brand name, include it as "brandName"
- Preserve exact spelling, capitalization, and special characters
- For array fields ({", ".join(array_fields)}), return JSON arrays
- For fields with no clear value from the conversation, omit them entirely
- Return ONLY valid JSON, no markdown, no explanation
- If nothing was clearly established, return an empty object {{}}"""


def parse_extraction_response(text: str | None) -> ExtractedFieldSet | None:
    """Analyse la réponse du modèle d'extraction.

    Retourne None pour une réponse vide, non JSON, non objet, ou sans valeur exploitable.
    """
    if not text or not text.strip():
        return None
    body = text.strip()
    fenced = _CODE_FENCE.match(body)
    if fenced:
        body = fenced.group(1).strip()
    try:
        parsed = json.loads(body)
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None

    result: ExtractedFieldSet = {}
    for key, value in parsed.items():
        if key not in _KNOWN_FIELDS:
            continue
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        result[key] = value
    return result or None


class ExtractionService:
    """Appel d'extraction de champs sur les derniers tours de conversation."""

    def __init__(
        self,
        llm: LLM,
        catalog: StepCatalog,
        *,
        model: str = "gpt-4o-mini",
        temperature: float = 0.1,
        max_tokens: int = 512,
    ) -> None:
        self.llm = llm
        self.catalog = catalog
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def extract(
        self, step_id: str, transcript: Sequence[Mapping[str, Any]]
    ) -> ExtractedFieldSet | None:
        """Propose les champs confirmés dans l'échange, ou None.

        Une erreur réseau lève ExtractionFailure; une réponse inexploitable donne None.
        """
        prompt = build_extraction_prompt(self.catalog, step_id, transcript)
        if not prompt:
            return None
        try:
            raw = await self.llm.complete(
                [{"role": "system", "content": prompt}],
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                json_mode=True,
            )
        except (openai.OpenAIError, OSError) as exc:
            raise ExtractionFailure(str(exc)) from exc
        fields = parse_extraction_response(raw)
        if fields is None:
            log.info("extraction_empty", step=step_id)
        return fields
