"""
Entités du domaine métier.

Ce module définit les objets manipulés par le registre de versions, le contrôle des révisions
média et l'assistant d'onboarding de marque (POPO, indépendants de l'ORM).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

ChangeSource = Literal["manual", "ai", "import"]
MediaSource = Literal["upload", "ai_generated", "url_import"]
MediaType = Literal["image", "audio", "video"]
MessageRole = Literal["user", "assistant", "system"]
ProfileStatus = Literal["in_progress", "completed", "archived"]

# Valeurs courantes des champs suivis, clé = nom logique (champs vides omis)
ProfileSnapshot = dict[str, Any]

CHANGE_SOURCES: tuple[str, ...] = ("manual", "ai", "import")
MEDIA_SOURCES: tuple[str, ...] = ("upload", "ai_generated", "url_import")


@dataclass
class FieldVersion:
    """
    Enregistrement immuable d'un changement de champ.

    Attributs
    - id: identifiant de l'enregistrement.
    - brand_profile_id: profil concerné.
    - user_id: auteur du changement.
    - field_name: nom logique du champ (ex: "brandName").
    - old_value / new_value: valeurs texte (JSON canonique pour listes/objets).
    - change_source: manual | ai | import.
    - change_reason: note libre (optionnelle).
    - version_number: 1, 2, 3... par (profil, champ).
    - created_at: ISO datetime de création.
    """

    id: int
    brand_profile_id: str
    user_id: str
    field_name: str
    old_value: str | None
    new_value: str | None
    change_source: ChangeSource
    change_reason: str | None
    version_number: int
    created_at: str


@dataclass
class RevisionContent:
    """Contenu d'une révision média (référence de stockage et métadonnées)."""

    url: str | None = None
    storage_key: str | None = None
    mime_type: str | None = None
    file_size: int | None = None
    width: int | None = None
    height: int | None = None
    duration_seconds: float | None = None
    metadata: dict[str, Any] | None = None


@dataclass
class MediaRevision:
    """Révision d'un asset média; au plus une révision courante par asset."""

    id: int
    brand_media_id: str
    revision_number: int
    content: RevisionContent
    source: MediaSource
    user_id: str
    change_note: str | None
    is_current: bool
    created_at: str


@dataclass
class MediaActivity:
    """Entrée du journal d'activité des assets média."""

    id: int
    brand_profile_id: str
    brand_media_id: str | None
    user_id: str
    action: str
    description: str
    details: dict[str, Any] | None
    source: str
    created_at: str


@dataclass
class Attachment:
    """Pièce jointe d'un message utilisateur (image, document, audio...)."""

    type: str
    name: str
    url: str

    @property
    def is_image(self) -> bool:
        return self.type == "image"


@dataclass
class OnboardingMessage:
    """Message du transcript d'onboarding (ordre = date de création)."""

    id: int
    brand_profile_id: str
    user_id: str
    role: MessageRole
    content: str
    step: str | None
    created_at: str
    attachments: list[Attachment] = field(default_factory=list)
    metadata: dict[str, Any] | None = None


@dataclass
class BrandProfile:
    """Profil de marque et valeurs courantes des champs suivis."""

    id: str
    user_id: str
    status: ProfileStatus
    onboarding_step: str
    brand_name_confirmed: bool
    fields: ProfileSnapshot
    created_at: str
    updated_at: str


@dataclass
class BrandText:
    """Texte de marque enregistré (accroche, message, légal...)."""

    id: str
    brand_profile_id: str
    category: str
    key: str
    label: str
    value: str
    language: str = "en"
    sort_order: int = 0


@dataclass
class AssetSummary:
    """Inventaire agrégé des assets d'une marque."""

    text_count: int = 0
    image_count: int = 0
    audio_count: int = 0
    video_count: int = 0

    @property
    def total_count(self) -> int:
        return self.text_count + self.image_count + self.audio_count + self.video_count


@dataclass
class BrandContentContext:
    """Contenus complémentaires fournis au modèle (textes + inventaire média)."""

    texts: list[BrandText] = field(default_factory=list)
    summary: AssetSummary = field(default_factory=AssetSummary)
