"""SQLAlchemy models for persistence layer (profils, versions, transcript, médias)."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Classe de base pour tous les modèles SQLAlchemy."""

    metadata = MetaData()


class BrandProfileORM(Base):
    """Profil de marque; une colonne par champ suivi (valeur courante matérialisée)."""

    __tablename__ = "brand_profiles"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    status = Column(String(16), nullable=False, default="in_progress", index=True)

    brand_name = Column(Text, nullable=True)
    brand_name_confirmed = Column(Boolean, nullable=False, default=False)
    tagline = Column(Text, nullable=True)
    mission_statement = Column(Text, nullable=True)
    vision_statement = Column(Text, nullable=True)
    elevator_pitch = Column(Text, nullable=True)

    brand_archetype = Column(Text, nullable=True)
    brand_personality_traits = Column(Text, nullable=True)
    tone_of_voice = Column(Text, nullable=True)
    communication_style = Column(Text, nullable=True)

    target_audience = Column(Text, nullable=True)
    customer_pain_points = Column(Text, nullable=True)
    value_proposition = Column(Text, nullable=True)

    primary_color = Column(Text, nullable=True)
    secondary_color = Column(Text, nullable=True)
    accent_color = Column(Text, nullable=True)
    color_palette = Column(Text, nullable=True)
    typography_heading = Column(Text, nullable=True)
    typography_body = Column(Text, nullable=True)
    logo_concept = Column(Text, nullable=True)
    logo_url = Column(Text, nullable=True)

    industry = Column(Text, nullable=True)
    competitors = Column(Text, nullable=True)
    unique_selling_points = Column(Text, nullable=True)
    market_position = Column(Text, nullable=True)

    origin_story = Column(Text, nullable=True)
    brand_values = Column(Text, nullable=True)
    brand_promise = Column(Text, nullable=True)

    style_guide = Column(Text, nullable=True)

    onboarding_step = Column(String(32), nullable=False, default="welcome")
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow)


class BrandFieldVersionORM(Base):
    """Historique append-only des changements de champs."""

    __tablename__ = "brand_field_versions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    brand_profile_id = Column(
        String(36), ForeignKey("brand_profiles.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(String(64), nullable=False)
    field_name = Column(String(64), nullable=False)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    change_source = Column(String(16), nullable=False, default="manual")
    change_reason = Column(Text, nullable=True)
    version_number = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint(
            "brand_profile_id",
            "field_name",
            "version_number",
            name="uq_field_version_number",
        ),
        Index("ix_field_versions_profile", "brand_profile_id", "created_at"),
    )


class OnboardingMessageORM(Base):
    """Transcript de l'assistant d'onboarding."""

    __tablename__ = "onboarding_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    brand_profile_id = Column(
        String(36), ForeignKey("brand_profiles.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(String(64), nullable=False)
    role = Column(String(16), nullable=False)
    content = Column(Text, nullable=False)
    step = Column(String(32), nullable=True, index=True)
    attachments = Column(JSON, nullable=True)
    metadata_ = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    __table_args__ = (Index("ix_onboarding_messages_profile", "brand_profile_id", "created_at"),)


class BrandTextORM(Base):
    """Textes de marque (nommage, messages, légal, réseaux sociaux...)."""

    __tablename__ = "brand_texts"

    id = Column(String(36), primary_key=True)
    brand_profile_id = Column(
        String(36), ForeignKey("brand_profiles.id", ondelete="CASCADE"), nullable=False
    )
    category = Column(String(32), nullable=False)
    key = Column(String(64), nullable=False)
    label = Column(String(255), nullable=False)
    value = Column(Text, nullable=False)
    language = Column(String(8), nullable=False, default="en")
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=_utcnow)


class BrandMediaORM(Base):
    """Asset média; reflète le contenu de sa révision courante."""

    __tablename__ = "brand_media"

    id = Column(String(36), primary_key=True)
    brand_profile_id = Column(
        String(36), ForeignKey("brand_profiles.id", ondelete="CASCADE"), nullable=False
    )
    media_type = Column(String(16), nullable=False)
    name = Column(String(255), nullable=False)
    url = Column(Text, nullable=True)
    storage_key = Column(Text, nullable=True)
    mime_type = Column(String(128), nullable=True)
    file_size = Column(Integer, nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    duration_seconds = Column(Float, nullable=True)
    source = Column(String(16), nullable=False, default="upload")
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow)


class MediaRevisionORM(Base):
    """Historique des révisions d'un asset média."""

    __tablename__ = "media_revisions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    brand_media_id = Column(
        String(36), ForeignKey("brand_media.id", ondelete="CASCADE"), nullable=False
    )
    revision_number = Column(Integer, nullable=False)
    is_current = Column(Boolean, nullable=False, default=False)
    url = Column(Text, nullable=True)
    storage_key = Column(Text, nullable=True)
    mime_type = Column(String(128), nullable=True)
    file_size = Column(Integer, nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    duration_seconds = Column(Float, nullable=True)
    source = Column(String(16), nullable=False, default="upload")
    user_id = Column(String(64), nullable=False)
    change_note = Column(Text, nullable=True)
    metadata_ = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint("brand_media_id", "revision_number", name="uq_media_revision_number"),
        Index("ix_media_revisions_current", "brand_media_id", "is_current"),
    )


class MediaActivityORM(Base):
    """Journal d'audit des opérations sur les assets média."""

    __tablename__ = "media_activity_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    brand_profile_id = Column(
        String(36), ForeignKey("brand_profiles.id", ondelete="CASCADE"), nullable=False
    )
    brand_media_id = Column(
        String(36), ForeignKey("brand_media.id", ondelete="SET NULL"), nullable=True
    )
    user_id = Column(String(64), nullable=False)
    action = Column(String(32), nullable=False)
    description = Column(Text, nullable=False)
    details = Column(JSON, nullable=True)
    source = Column(String(16), nullable=False, default="upload")
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    __table_args__ = (Index("ix_media_activity_profile", "brand_profile_id", "created_at"),)
