"""Accès SQL aux profils de marque (création, lecture avec contrôle de propriété, étape)."""

from __future__ import annotations

import random
import uuid
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.domain.entities import BrandProfile
from backend.domain.errors import NotFoundError
from backend.infra.repo.field_version_repo import profile_snapshot
from backend.infra.repo.models import BrandProfileORM

_NAME_ADJECTIVES = (
    "Amber", "Bold", "Bright", "Cobalt", "Crimson", "Golden", "Lunar", "Nimble",
    "Silver", "Solar", "Swift", "Velvet", "Vivid", "Wild",
)
_NAME_NOUNS = (
    "Atlas", "Beacon", "Compass", "Ember", "Falcon", "Harbor", "Lotus", "Meadow",
    "Orbit", "Phoenix", "Summit", "Tide", "Willow", "Zephyr",
)


def placeholder_brand_name(rng: random.Random | None = None) -> str:
    """Nom provisoire lisible ("Cobalt Phoenix") en attendant le vrai nom."""
    rng = rng or random.Random()
    return f"{rng.choice(_NAME_ADJECTIVES)} {rng.choice(_NAME_NOUNS)}"


def _to_entity(row: BrandProfileORM) -> BrandProfile:
    return BrandProfile(
        id=row.id,
        user_id=row.user_id,
        status=row.status,
        onboarding_step=row.onboarding_step,
        brand_name_confirmed=bool(row.brand_name_confirmed),
        fields=profile_snapshot(row),
        created_at=(row.created_at.isoformat() if row.created_at else ""),
        updated_at=(row.updated_at.isoformat() if row.updated_at else ""),
    )


class ProfileRepo:
    """CRUD minimal pour les profils de marque."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, user_id: str, *, first_step: str = "welcome") -> BrandProfile:
        row = BrandProfileORM(
            id=str(uuid.uuid4()),
            user_id=user_id,
            status="in_progress",
            brand_name=placeholder_brand_name(),
            brand_name_confirmed=False,
            onboarding_step=first_step,
        )
        self._session.add(row)
        self._session.flush()
        return _to_entity(row)

    def get_owned(self, profile_id: str, user_id: str) -> BrandProfile:
        """Retourne le profil s'il appartient à l'utilisateur, sinon NotFoundError.

        Un profil d'un autre utilisateur est indiscernable d'un profil inexistant.
        """
        row = self._session.get(BrandProfileORM, profile_id)
        if row is None or row.user_id != user_id:
            raise NotFoundError("Brand profile not found", details={"profile_id": profile_id})
        return _to_entity(row)

    def list_for_user(self, user_id: str) -> list[BrandProfile]:
        stmt = (
            select(BrandProfileORM)
            .where(BrandProfileORM.user_id == user_id)
            .order_by(BrandProfileORM.created_at.desc())
        )
        return [_to_entity(r) for r in self._session.execute(stmt).scalars().all()]

    def set_step(self, profile_id: str, step: str, *, completed: bool = False) -> None:
        """Avance le pointeur d'étape; passe le statut à `completed` sur l'étape finale."""
        row = self._session.get(BrandProfileORM, profile_id)
        if row is None:
            raise NotFoundError("Brand profile not found", details={"profile_id": profile_id})
        row.onboarding_step = step
        if completed:
            row.status = "completed"
        row.updated_at = datetime.now(UTC)
        self._session.flush()
