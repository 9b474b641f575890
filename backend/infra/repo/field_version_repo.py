# ============================================================
# Module : backend/infra/repo/field_version_repo.py
# Objet  : Registre append-only des versions de champs de marque.
# Notes  : numéros alloués max+1, contrainte d'unicité + retry.
# ============================================================

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.app.metrics import FIELD_VERSIONS_WRITTEN
from backend.domain.brand_fields import (
    FIELD_REGISTRY,
    IDENTITY_FIELD,
    BrandField,
    decode_value,
    descriptor,
    encode_value,
    resolve_field,
)
from backend.domain.entities import CHANGE_SOURCES, ChangeSource, FieldVersion, ProfileSnapshot
from backend.domain.errors import ConcurrentVersionConflict, NotFoundError, ValidationError
from backend.infra.repo.models import BrandFieldVersionORM, BrandProfileORM

log = structlog.get_logger(__name__)


def _to_entity(row: BrandFieldVersionORM) -> FieldVersion:
    return FieldVersion(
        id=row.id,
        brand_profile_id=row.brand_profile_id,
        user_id=row.user_id,
        field_name=row.field_name,
        old_value=row.old_value,
        new_value=row.new_value,
        change_source=row.change_source,
        change_reason=row.change_reason,
        version_number=row.version_number,
        created_at=(row.created_at.isoformat() if row.created_at else ""),
    )


class VersionLedger:
    """Historique des changements de champs d'un profil de marque.

    Les enregistrements ne sont jamais modifiés ni supprimés: un retour arrière ajoute une
    nouvelle version. Le repo ne committe pas; la session appelante porte la transaction.
    """

    def __init__(self, session: Session, *, max_retries: int = 3) -> None:
        """Construit le registre avec une session SQLAlchemy."""
        self._session = session
        self._max_retries = max(1, max_retries)

    def _profile_row(self, profile_id: str) -> BrandProfileORM:
        row = self._session.get(BrandProfileORM, profile_id)
        if row is None:
            raise NotFoundError("Brand profile not found", details={"profile_id": profile_id})
        return row

    def _next_version_number(self, profile_id: str, field: BrandField) -> int:
        stmt = select(func.max(BrandFieldVersionORM.version_number)).where(
            BrandFieldVersionORM.brand_profile_id == profile_id,
            BrandFieldVersionORM.field_name == field.value,
        )
        current = self._session.execute(stmt).scalar()
        return (current or 0) + 1

    def append_version(
        self,
        profile_id: str,
        field: str | BrandField,
        old_value: Any,
        new_value: Any,
        source: ChangeSource,
        *,
        user_id: str,
        reason: str | None = None,
    ) -> FieldVersion:
        """Ajoute une version puis met à jour la valeur matérialisée du profil.

        Un conflit sur (profil, champ, numéro) relance l'allocation dans un SAVEPOINT, au plus
        `max_retries` fois, puis lève ConcurrentVersionConflict.
        """
        bf = resolve_field(field)
        if source not in CHANGE_SOURCES:
            raise ValidationError(f"Unknown change source: {source}", details={"source": source})
        profile = self._profile_row(profile_id)
        old_text = encode_value(bf, old_value)
        new_text = encode_value(bf, new_value)

        for attempt in range(1, self._max_retries + 1):
            number = self._next_version_number(profile_id, bf)
            row = BrandFieldVersionORM(
                brand_profile_id=profile_id,
                user_id=user_id,
                field_name=bf.value,
                old_value=old_text,
                new_value=new_text,
                change_source=source,
                change_reason=reason,
                version_number=number,
            )
            try:
                with self._session.begin_nested():
                    self._session.add(row)
                    self._session.flush()
            except IntegrityError:
                log.warning(
                    "version_alloc_conflict",
                    profile_id=profile_id,
                    field=bf.value,
                    version_number=number,
                    attempt=attempt,
                )
                continue
            setattr(profile, descriptor(bf).column, new_text)
            if bf is IDENTITY_FIELD and source == "manual":
                profile.brand_name_confirmed = True
            profile.updated_at = datetime.now(UTC)
            self._session.flush()
            FIELD_VERSIONS_WRITTEN.labels(source=source).inc()
            return _to_entity(row)

        raise ConcurrentVersionConflict(
            "Could not allocate a version number",
            details={"profile_id": profile_id, "field": bf.value},
        )

    def update_field_with_version(
        self,
        profile_id: str,
        field: str | BrandField,
        new_value: Any,
        source: ChangeSource,
        *,
        user_id: str,
        reason: str | None = None,
    ) -> FieldVersion:
        """Écrit une nouvelle valeur en journalisant la transition depuis la valeur courante."""
        bf = resolve_field(field)
        profile = self._profile_row(profile_id)
        current = getattr(profile, descriptor(bf).column)
        return self.append_version(
            profile_id, bf, current, new_value, source, user_id=user_id, reason=reason
        )

    def get_field_history(self, profile_id: str, field: str | BrandField) -> list[FieldVersion]:
        """Historique d'un champ, par numéro de version croissant."""
        bf = resolve_field(field)
        stmt = (
            select(BrandFieldVersionORM)
            .where(
                BrandFieldVersionORM.brand_profile_id == profile_id,
                BrandFieldVersionORM.field_name == bf.value,
            )
            .order_by(BrandFieldVersionORM.version_number.asc())
        )
        return [_to_entity(r) for r in self._session.execute(stmt).scalars().all()]

    def get_all_history(self, profile_id: str, limit: int | None = None) -> list[FieldVersion]:
        """Activité tous champs confondus, la plus récente en premier."""
        stmt = (
            select(BrandFieldVersionORM)
            .where(BrandFieldVersionORM.brand_profile_id == profile_id)
            .order_by(BrandFieldVersionORM.created_at.desc(), BrandFieldVersionORM.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return [_to_entity(r) for r in self._session.execute(stmt).scalars().all()]

    def revert_field(
        self, profile_id: str, field: str | BrandField, version_id: int, *, user_id: str
    ) -> FieldVersion:
        """Restaure la valeur d'une version passée en ajoutant une nouvelle version."""
        bf = resolve_field(field)
        target = self._session.get(BrandFieldVersionORM, version_id)
        if (
            target is None
            or target.brand_profile_id != profile_id
            or target.field_name != bf.value
        ):
            raise NotFoundError(
                "Version not found",
                details={"profile_id": profile_id, "field": bf.value, "version_id": version_id},
            )
        version = self.update_field_with_version(
            profile_id,
            bf,
            target.new_value,
            "manual",
            user_id=user_id,
            reason=f"Reverted to version {target.version_number}",
        )
        log.info(
            "field_reverted",
            profile_id=profile_id,
            field=bf.value,
            target_version=target.version_number,
            new_version=version.version_number,
        )
        return version

    def snapshot(self, profile_id: str) -> ProfileSnapshot:
        """Valeurs courantes décodées des champs renseignés."""
        profile = self._profile_row(profile_id)
        return profile_snapshot(profile)


def profile_snapshot(profile: BrandProfileORM) -> ProfileSnapshot:
    """Construit le snapshot (nom logique -> valeur) depuis une ligne de profil."""
    snap: ProfileSnapshot = {}
    for bf, desc in FIELD_REGISTRY.items():
        value = decode_value(bf, getattr(profile, desc.column))
        if value is None:
            continue
        snap[bf.value] = value
    return snap
