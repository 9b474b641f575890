# mypy: ignore-errors
"""
Migration Alembic initiale: profils de marque, journal de versions, transcript et médias.
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None

_PROFILE_TEXT_COLUMNS = (
    "brand_name",
    "tagline",
    "mission_statement",
    "vision_statement",
    "elevator_pitch",
    "brand_archetype",
    "brand_personality_traits",
    "tone_of_voice",
    "communication_style",
    "target_audience",
    "customer_pain_points",
    "value_proposition",
    "primary_color",
    "secondary_color",
    "accent_color",
    "color_palette",
    "typography_heading",
    "typography_body",
    "logo_concept",
    "logo_url",
    "industry",
    "competitors",
    "unique_selling_points",
    "market_position",
    "origin_story",
    "brand_values",
    "brand_promise",
    "style_guide",
)


def _media_content_columns() -> list[sa.Column]:
    return [
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("storage_key", sa.Text(), nullable=True),
        sa.Column("mime_type", sa.String(length=128), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("width", sa.Integer(), nullable=True),
        sa.Column("height", sa.Integer(), nullable=True),
        sa.Column("duration_seconds", sa.Float(), nullable=True),
    ]


def upgrade() -> None:
    """Crée les tables de l'onboarding de marque et leurs index."""
    op.create_table(
        "brand_profiles",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("brand_name_confirmed", sa.Boolean(), nullable=False),
        *[sa.Column(name, sa.Text(), nullable=True) for name in _PROFILE_TEXT_COLUMNS],
        sa.Column("onboarding_step", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_brand_profiles_user_id", "brand_profiles", ["user_id"])
    op.create_index("ix_brand_profiles_status", "brand_profiles", ["status"])

    op.create_table(
        "brand_field_versions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "brand_profile_id",
            sa.String(length=36),
            sa.ForeignKey("brand_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("field_name", sa.String(length=64), nullable=False),
        sa.Column("old_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("change_source", sa.String(length=16), nullable=False),
        sa.Column("change_reason", sa.Text(), nullable=True),
        sa.Column("version_number", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "brand_profile_id", "field_name", "version_number", name="uq_field_version_number"
        ),
    )
    op.create_index(
        "ix_field_versions_profile", "brand_field_versions", ["brand_profile_id", "created_at"]
    )

    op.create_table(
        "onboarding_messages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "brand_profile_id",
            sa.String(length=36),
            sa.ForeignKey("brand_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("step", sa.String(length=32), nullable=True),
        sa.Column("attachments", sa.JSON(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_onboarding_messages_step", "onboarding_messages", ["step"])
    op.create_index(
        "ix_onboarding_messages_profile", "onboarding_messages", ["brand_profile_id", "created_at"]
    )

    op.create_table(
        "brand_texts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "brand_profile_id",
            sa.String(length=36),
            sa.ForeignKey("brand_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("key", sa.String(length=64), nullable=False),
        sa.Column("label", sa.String(length=255), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("language", sa.String(length=8), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "brand_media",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "brand_profile_id",
            sa.String(length=36),
            sa.ForeignKey("brand_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("media_type", sa.String(length=16), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_media_content_columns(),
        sa.Column("source", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "media_revisions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "brand_media_id",
            sa.String(length=36),
            sa.ForeignKey("brand_media.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("revision_number", sa.Integer(), nullable=False),
        sa.Column("is_current", sa.Boolean(), nullable=False),
        *_media_content_columns(),
        sa.Column("source", sa.String(length=16), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("change_note", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("brand_media_id", "revision_number", name="uq_media_revision_number"),
    )
    op.create_index(
        "ix_media_revisions_current", "media_revisions", ["brand_media_id", "is_current"]
    )

    op.create_table(
        "media_activity_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "brand_profile_id",
            sa.String(length=36),
            sa.ForeignKey("brand_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "brand_media_id",
            sa.String(length=36),
            sa.ForeignKey("brand_media.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("action", sa.String(length=32), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("source", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_media_activity_profile", "media_activity_log", ["brand_profile_id", "created_at"]
    )


def downgrade() -> None:
    """Supprime les tables dans l'ordre inverse des dépendances."""
    op.drop_table("media_activity_log")
    op.drop_table("media_revisions")
    op.drop_table("brand_media")
    op.drop_table("brand_texts")
    op.drop_table("onboarding_messages")
    op.drop_table("brand_field_versions")
    op.drop_table("brand_profiles")
