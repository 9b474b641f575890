# Schémas Pydantic exposés par l'API (requêtes et réponses, clés camelCase).

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from backend.domain.entities import BrandProfile


class CamelModel(BaseModel):
    """Base: attributs snake_case côté Python, clés camelCase côté JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# ---- Requêtes ----


class AttachmentIn(CamelModel):
    type: str
    name: str
    url: str


class ChatRequest(CamelModel):
    """Tour de conversation; les champs vides sont refusés par l'orchestrateur (400)."""

    profile_id: str = ""
    message: str = ""
    step: str = ""
    attachments: list[AttachmentIn] = Field(default_factory=list)


class UpdateFieldRequest(CamelModel):
    profile_id: str
    field_name: str
    new_value: Any = None
    change_source: Literal["manual", "ai", "import"] = "manual"
    change_reason: str | None = None


class RevertFieldRequest(CamelModel):
    profile_id: str
    field_name: str
    version_id: int


class RevisionRequest(CamelModel):
    """Création d'une révision (`create`) ou retour à une révision passée (`revert`)."""

    action: Literal["create", "revert"] = "create"
    brand_media_id: str | None = None
    revision_id: int | None = None
    url: str | None = None
    storage_key: str | None = None
    mime_type: str | None = None
    file_size: int | None = None
    width: int | None = None
    height: int | None = None
    duration_seconds: float | None = None
    source: Literal["upload", "ai_generated", "url_import"] = "upload"
    change_note: str | None = None
    metadata: dict[str, Any] | None = None


# ---- Réponses ----


class FieldVersionOut(CamelModel):
    id: int
    brand_profile_id: str
    user_id: str
    field_name: str
    old_value: str | None
    new_value: str | None
    change_source: str
    change_reason: str | None
    version_number: int
    created_at: str


class AttachmentOut(CamelModel):
    type: str
    name: str
    url: str


class MessageOut(CamelModel):
    id: int
    brand_profile_id: str
    role: str
    content: str
    step: str | None
    attachments: list[AttachmentOut] = Field(default_factory=list)
    created_at: str


class ProfileOut(CamelModel):
    """Profil de marque; `fields` contient les valeurs courantes par nom logique."""

    id: str
    user_id: str
    status: str
    onboarding_step: str
    brand_name_confirmed: bool
    fields: dict[str, Any]
    progress: int = 0
    created_at: str
    updated_at: str

    @classmethod
    def from_profile(cls, profile: BrandProfile, progress: int = 0) -> "ProfileOut":
        return cls.model_validate(profile).model_copy(update={"progress": progress})


class RevisionContentOut(CamelModel):
    url: str | None = None
    storage_key: str | None = None
    mime_type: str | None = None
    file_size: int | None = None
    width: int | None = None
    height: int | None = None
    duration_seconds: float | None = None
    metadata: dict[str, Any] | None = None


class MediaRevisionOut(CamelModel):
    id: int
    brand_media_id: str
    revision_number: int
    content: RevisionContentOut
    source: str
    user_id: str
    change_note: str | None
    is_current: bool
    created_at: str


class MediaActivityOut(CamelModel):
    id: int
    brand_profile_id: str
    brand_media_id: str | None
    user_id: str
    action: str
    description: str
    details: dict[str, Any] | None
    source: str
    created_at: str
