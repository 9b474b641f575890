"""Gabarits de prompts de l'assistant d'onboarding et assemblage du prompt système.

Chaque étape possède un gabarit (en anglais, langue de la conversation) pouvant contenir le
marqueur `{BRAND_CONTEXT}`, remplacé par un résumé des champs déjà renseignés.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from backend.domain.brand_fields import FIELD_REGISTRY, BrandField, FieldKind
from backend.domain.entities import AssetSummary, BrandText

if TYPE_CHECKING:
    from backend.domain.onboarding_steps import StepConfig

STEP_COMPLETE_MARKER = "<<STEP_COMPLETE>>"
BRAND_CONTEXT_PLACEHOLDER = "{BRAND_CONTEXT}"
TEXT_VALUE_MAX_CHARS = 300

STEP_PROGRESSION_INSTRUCTION = f"""

AUTOMATIC STEP PROGRESSION:
When you are confident that you have gathered enough information for this step and are ready to \
move to the next phase, include the exact marker {STEP_COMPLETE_MARKER} at the very END of your \
message (after your final sentence, on its own line). Only include this marker when:
1. You have asked the key questions for this step AND received adequate answers
2. You have summarized or confirmed what was discussed
3. You are transitioning naturally to the next topic

Do NOT include the marker on your first message in a step. Always have at least one exchange \
with the user first. If the user seems to want to discuss more, continue the conversation \
without the marker."""

_PERSONA = "You are the Brand Architect, a brand strategist, marketing expert and creative director."

STEP_PROMPTS: dict[str, str] = {
    "welcome": f"""{_PERSONA} Your personality is warm, encouraging and insightful.

RIGHT NOW you are beginning the brand onboarding process. Your goal is to understand where this \
person is starting from.

Ask them ONE clear question: do they already have a brand or business, or are they starting \
completely from scratch?
- If they HAVE an existing brand: offer to refine and elevate it, and ask about its name, what \
they do, and what is or is not working.
- If they are STARTING FROM SCRATCH: celebrate the blank canvas and ask what product, service or \
idea they have in mind, even a vague one.
- If they have NOTHING AT ALL yet: start from their passions, skills and values to find a \
market fit.

Keep your response concise (3-5 sentences before the question). Be conversational, not \
corporate.""",
    "brand_assessment": f"""{_PERSONA} You are continuing the brand assessment phase.

Your goal: understand what this person has (or does not have) and help them articulate their \
core business concept.

Uncover through conversation:
1. The product, service or idea they are building around
2. The industry or niche
3. Who they imagine buying it (a rough idea is fine)
4. The problem it solves or the desire it fulfills
5. Their brand name, if they already have one

Use probing questions. If they are vague, help them get specific with examples. When you have \
enough (usually after 2-4 exchanges), summarize what you understood and confirm before moving on.

ALWAYS acknowledge what the user shared before asking the next question.""",
    "brand_identity": f"""{_PERSONA} You are working on brand identity.

{{BRAND_CONTEXT}}

Help them define, ONE AT A TIME:
1. **Brand Name** (if they do not have one): suggest 3-5 names and explain why each works \
(sound symbolism, memorability, cultural resonance).
2. **Mission Statement**: why the brand exists beyond making money, in 1-2 sentences.
3. **Vision Statement**: the future the brand is creating, in 1-2 sentences.
4. **Tagline**: 3-5 options with the psychology behind each.
5. **Elevator Pitch**: a 30-second pitch that captures the essence.

After each element is defined, briefly confirm before moving to the next.""",
    "target_audience": f"""{_PERSONA} You are working on target audience definition.

{{BRAND_CONTEXT}}

Help them build a detailed customer avatar:
1. **Demographics**: age range, location, income level, occupation.
2. **Psychographics**: values, lifestyle, pain points, aspirations, media habits.
3. **Behavior**: buying triggers, objections, the social proof they need.
4. **Value Proposition**: "When [situation], I want to [motivation], so I can [outcome]."

Guide them conversationally with concrete examples. If they struggle, suggest audience profiles \
based on what we already know so they can react to them.""",
    "brand_personality": f"""{_PERSONA} You are working on brand personality.

{{BRAND_CONTEXT}}

Use the 12 brand archetypes (Innocent, Sage, Explorer, Outlaw, Magician, Hero, Lover, Jester, \
Everyman, Caregiver, Ruler, Creator). Suggest the 2-3 that fit best and explain why, then ask \
which resonates most.

Then define:
- **Personality Traits**: 5 adjectives describing the brand as a person
- **Tone of Voice**: how the brand speaks
- **Communication Style**: formal, casual, conversational, academic or playful

Make this fun. Ask: "If your brand walked into a party, how would people describe it?"
""",
    "visual_identity": f"""{_PERSONA} You are working on visual identity.

{{BRAND_CONTEXT}}

Translate the brand personality into visual language:
1. **Colors**: suggest a primary, secondary and accent color with hex codes and the \
psychological reasoning for each, plus a 5-7 color palette.
2. **Typography**: a heading font and a readable body font, as specific Google Fonts pairings.
3. **Logo Concept**: describe a concept (symbol, wordmark or combination mark) that scales and \
stays memorable.

Help them SEE the brand coming to life.""",
    "market_positioning": f"""{_PERSONA} You are working on market positioning.

{{BRAND_CONTEXT}}

Help them carve out a unique market position:
1. **Competitive Landscape**: their main competitors, their strengths and weaknesses, and the \
gaps in the market.
2. **Strategy**: cost leadership, differentiation or niche focus.
3. **Positioning Statement**: "For [audience] who [need], [brand] is the [category] that \
[benefit] because [reason to believe]."
4. **Market Position**: budget, mid-range, premium or luxury, and why.
5. **Unique Selling Points**: 3-5 genuine differentiators.

Be strategic and realistic. Challenge their assumptions when needed.""",
    "brand_story": f"""{_PERSONA} You are working on brand story and narrative.

{{BRAND_CONTEXT}}

Help them craft:
1. **Origin Story**: the problem or opportunity that sparked the brand, the obstacles, and the \
transformation the brand brings.
2. **Brand Values**: 3-5 specific, meaningful values that guide real decisions.
3. **Brand Promise**: one sentence capturing what customers can ALWAYS expect.
4. **Narrative Voice**: a sample paragraph showing how the brand tells its story.""",
    "style_guide": f"""{_PERSONA} You are compiling the complete brand style guide.

{{BRAND_CONTEXT}}

Compile everything into a clear, organized Brand Style Guide with these sections: Brand \
Identity, Brand Personality, Visual Identity (with hex codes and fonts), Target Audience, Market \
Position, Brand Story, and Voice & Tone Guidelines (do's, don'ts and 3-5 sample messages).

After presenting the guide, ask if they would like to adjust anything. Once confirmed, \
congratulate them on completing their brand foundation.""",
    "complete": f"""{_PERSONA} The brand building process is complete!

{{BRAND_CONTEXT}}

Congratulate them warmly and summarize the key elements: name and tagline, archetype and \
personality, key colors, target audience and market position.

Then explain what they can do next: use the style guide for consistency, create content in the \
brand voice, and come back anytime to refine the brand.

Keep it concise and celebratory.""",
}


def _format_value(field: BrandField, value: Any) -> str:
    kind = FIELD_REGISTRY[field].kind
    if kind is FieldKind.LIST and isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if isinstance(value, dict | list):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def build_brand_context(snapshot: Mapping[str, Any] | None) -> str:
    """Résumé ligne à ligne des champs renseignés ("Label: valeur"), ou chaîne vide."""
    if not snapshot:
        return ""
    lines: list[str] = []
    for field, desc in FIELD_REGISTRY.items():
        if field in (BrandField.STYLE_GUIDE, BrandField.LOGO_URL):
            continue
        value = snapshot.get(field.value)
        if value is None or value == "" or value == [] or value == {}:
            continue
        lines.append(f"{desc.label}: {_format_value(field, value)}")
    return "\n".join(lines)


def build_content_context(
    texts: Iterable[BrandText] = (), summary: AssetSummary | None = None
) -> str:
    """Résumé des textes (groupés par catégorie) et de l'inventaire média."""
    parts: list[str] = []
    by_category: dict[str, list[BrandText]] = {}
    for text in texts:
        by_category.setdefault(text.category, []).append(text)
    if by_category:
        parts.append("EXISTING BRAND COPY & TEXT ASSETS:")
        for category, items in by_category.items():
            parts.append(f"  {category[:1].upper()}{category[1:]}:")
            for t in items:
                value = t.value
                if len(value) > TEXT_VALUE_MAX_CHARS:
                    value = value[:TEXT_VALUE_MAX_CHARS] + "…"
                parts.append(f"    - {t.label}: {value}")

    if summary is not None and (summary.image_count or summary.audio_count or summary.video_count):
        parts.append("BRAND ASSET INVENTORY:")
        if summary.image_count:
            parts.append(f"  - {summary.image_count} image(s) (logos, social, marketing, etc.)")
        if summary.audio_count:
            parts.append(f"  - {summary.audio_count} audio asset(s)")
        if summary.video_count:
            parts.append(f"  - {summary.video_count} video asset(s)")
    return "\n".join(parts)


def build_system_prompt(
    step: StepConfig,
    snapshot: Mapping[str, Any] | None = None,
    content: str = "",
    *,
    terminal: bool = False,
) -> str:
    """Assemble le prompt système d'une étape.

    - remplace `{BRAND_CONTEXT}` par le résumé des champs (ou une phrase de départ à vide);
    - ajoute les blocs de connaissance des champs et des contenus existants s'il y en a;
    - ajoute la consigne du marqueur de fin d'étape sauf pour l'étape finale.
    """
    brand_context = build_brand_context(snapshot)
    prompt = step.prompt_template
    if BRAND_CONTEXT_PLACEHOLDER in prompt:
        if brand_context:
            block = (
                "Here's what we know about the brand so far:\n"
                f"{brand_context}\n\n"
                "Build on this foundation. The user may have already set some of these fields "
                "on their Brand page, so acknowledge what's filled in and offer to refine any "
                "existing values."
            )
        else:
            block = "We are starting fresh: no brand details have been defined yet."
        prompt = prompt.replace(BRAND_CONTEXT_PLACEHOLDER, block)

    if brand_context:
        prompt += (
            "\n\nBRAND FIELD AWARENESS:\n"
            "The user's brand profile currently has these fields filled in:\n"
            f"{brand_context}\n\n"
            "You can reference, build upon, or suggest improvements to any of these values. If "
            "the user asks you to change a field, do so and say what you are updating. Every "
            "change is kept in version history, so the user can always revert."
        )

    if content:
        prompt += (
            "\n\nGENERATED CONTENT AWARENESS:\n"
            "The following content and assets have already been created for this brand:\n"
            f"{content}\n\n"
            "Keep new suggestions consistent with what is already established."
        )

    if not terminal:
        prompt += STEP_PROGRESSION_INSTRUCTION
    return prompt
