"""Registre explicite des champs suivis d'un profil de marque.

Chaque champ logique (nom camelCase exposé à l'API et au modèle d'extraction) est décrit par sa
colonne de stockage, son libellé et sa nature (texte, liste, objet). Les listes et objets sont
stockés sous forme de JSON canonique.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from backend.domain.errors import ValidationError


class FieldKind(str, Enum):
    """Nature d'un champ, qui détermine son encodage en base."""

    TEXT = "text"
    LIST = "list"
    OBJECT = "object"


class BrandField(str, Enum):
    """Champs suivis par le registre de versions."""

    BRAND_NAME = "brandName"
    TAGLINE = "tagline"
    MISSION_STATEMENT = "missionStatement"
    VISION_STATEMENT = "visionStatement"
    ELEVATOR_PITCH = "elevatorPitch"
    BRAND_ARCHETYPE = "brandArchetype"
    BRAND_PERSONALITY_TRAITS = "brandPersonalityTraits"
    TONE_OF_VOICE = "toneOfVoice"
    COMMUNICATION_STYLE = "communicationStyle"
    TARGET_AUDIENCE = "targetAudience"
    CUSTOMER_PAIN_POINTS = "customerPainPoints"
    VALUE_PROPOSITION = "valueProposition"
    PRIMARY_COLOR = "primaryColor"
    SECONDARY_COLOR = "secondaryColor"
    ACCENT_COLOR = "accentColor"
    COLOR_PALETTE = "colorPalette"
    TYPOGRAPHY_HEADING = "typographyHeading"
    TYPOGRAPHY_BODY = "typographyBody"
    LOGO_CONCEPT = "logoConcept"
    LOGO_URL = "logoUrl"
    INDUSTRY = "industry"
    COMPETITORS = "competitors"
    UNIQUE_SELLING_POINTS = "uniqueSellingPoints"
    MARKET_POSITION = "marketPosition"
    ORIGIN_STORY = "originStory"
    BRAND_VALUES = "brandValues"
    BRAND_PROMISE = "brandPromise"
    STYLE_GUIDE = "styleGuide"


@dataclass(frozen=True)
class FieldDescriptor:
    """Description de stockage d'un champ suivi."""

    field: BrandField
    column: str
    label: str
    kind: FieldKind = FieldKind.TEXT


def _d(field: BrandField, column: str, label: str, kind: FieldKind = FieldKind.TEXT):
    return FieldDescriptor(field=field, column=column, label=label, kind=kind)


FIELD_REGISTRY: dict[BrandField, FieldDescriptor] = {
    d.field: d
    for d in (
        _d(BrandField.BRAND_NAME, "brand_name", "Brand Name"),
        _d(BrandField.TAGLINE, "tagline", "Tagline"),
        _d(BrandField.MISSION_STATEMENT, "mission_statement", "Mission Statement"),
        _d(BrandField.VISION_STATEMENT, "vision_statement", "Vision Statement"),
        _d(BrandField.ELEVATOR_PITCH, "elevator_pitch", "Elevator Pitch"),
        _d(BrandField.BRAND_ARCHETYPE, "brand_archetype", "Brand Archetype"),
        _d(
            BrandField.BRAND_PERSONALITY_TRAITS,
            "brand_personality_traits",
            "Personality Traits",
            FieldKind.LIST,
        ),
        _d(BrandField.TONE_OF_VOICE, "tone_of_voice", "Tone of Voice"),
        _d(BrandField.COMMUNICATION_STYLE, "communication_style", "Communication Style"),
        _d(BrandField.TARGET_AUDIENCE, "target_audience", "Target Audience", FieldKind.OBJECT),
        _d(
            BrandField.CUSTOMER_PAIN_POINTS,
            "customer_pain_points",
            "Customer Pain Points",
            FieldKind.LIST,
        ),
        _d(BrandField.VALUE_PROPOSITION, "value_proposition", "Value Proposition"),
        _d(BrandField.PRIMARY_COLOR, "primary_color", "Primary Color"),
        _d(BrandField.SECONDARY_COLOR, "secondary_color", "Secondary Color"),
        _d(BrandField.ACCENT_COLOR, "accent_color", "Accent Color"),
        _d(BrandField.COLOR_PALETTE, "color_palette", "Color Palette", FieldKind.LIST),
        _d(BrandField.TYPOGRAPHY_HEADING, "typography_heading", "Heading Font"),
        _d(BrandField.TYPOGRAPHY_BODY, "typography_body", "Body Font"),
        _d(BrandField.LOGO_CONCEPT, "logo_concept", "Logo Concept"),
        _d(BrandField.LOGO_URL, "logo_url", "Logo URL"),
        _d(BrandField.INDUSTRY, "industry", "Industry"),
        _d(BrandField.COMPETITORS, "competitors", "Competitors", FieldKind.LIST),
        _d(
            BrandField.UNIQUE_SELLING_POINTS,
            "unique_selling_points",
            "Unique Selling Points",
            FieldKind.LIST,
        ),
        _d(BrandField.MARKET_POSITION, "market_position", "Market Position"),
        _d(BrandField.ORIGIN_STORY, "origin_story", "Origin Story"),
        _d(BrandField.BRAND_VALUES, "brand_values", "Brand Values", FieldKind.LIST),
        _d(BrandField.BRAND_PROMISE, "brand_promise", "Brand Promise"),
        _d(BrandField.STYLE_GUIDE, "style_guide", "Style Guide", FieldKind.OBJECT),
    )
}

# Champs que le modèle d'extraction a le droit de proposer
EXTRACTABLE_FIELDS: frozenset[BrandField] = frozenset(BrandField) - {
    BrandField.LOGO_URL,
    BrandField.STYLE_GUIDE,
}

# Champ d'identité toujours demandé à l'extraction
IDENTITY_FIELD = BrandField.BRAND_NAME


def resolve_field(name: str | BrandField) -> BrandField:
    """Retourne le champ correspondant au nom logique, ou lève ValidationError."""
    if isinstance(name, BrandField):
        return name
    try:
        return BrandField(name)
    except ValueError as exc:
        raise ValidationError(f"Unknown field: {name}", details={"field": name}) from exc


def descriptor(field: BrandField) -> FieldDescriptor:
    """Descripteur de stockage d'un champ."""
    return FIELD_REGISTRY[field]


def encode_value(field: BrandField, value: Any) -> str | None:
    """Sérialise une valeur vers sa représentation texte stockée.

    Les listes/objets passent en JSON canonique; une chaîne déjà encodée est conservée telle quelle
    (cas d'un retour arrière sur une version stockée).
    """
    if value is None:
        return None
    kind = FIELD_REGISTRY[field].kind
    if kind is FieldKind.TEXT:
        if isinstance(value, list | dict):
            return canonical_json(value)
        return str(value)
    if isinstance(value, str):
        return value
    return canonical_json(value)


def decode_value(field: BrandField, raw: str | None) -> Any:
    """Désérialise une valeur stockée selon la nature du champ."""
    if raw is None or raw == "":
        return None
    if FIELD_REGISTRY[field].kind is FieldKind.TEXT:
        return raw
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def canonical_json(value: Any) -> str:
    """Encodage JSON stable (clés triées, UTF-8 lisible)."""
    return json.dumps(value, ensure_ascii=False, sort_keys=True)
