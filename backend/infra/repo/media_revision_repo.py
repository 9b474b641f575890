# ============================================================
# Module : backend/infra/repo/media_revision_repo.py
# Objet  : Révisions des assets média + journal d'activité.
# ============================================================

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from backend.domain.entities import (
    MEDIA_SOURCES,
    MediaActivity,
    MediaRevision,
    MediaSource,
    RevisionContent,
)
from backend.domain.errors import NotFoundError, ValidationError
from backend.infra.repo.models import BrandMediaORM, MediaActivityORM, MediaRevisionORM

log = structlog.get_logger(__name__)

_CONTENT_COLUMNS = (
    "url",
    "storage_key",
    "mime_type",
    "file_size",
    "width",
    "height",
    "duration_seconds",
)


def _revision_entity(row: MediaRevisionORM) -> MediaRevision:
    content = RevisionContent(
        **{col: getattr(row, col) for col in _CONTENT_COLUMNS}, metadata=row.metadata_
    )
    return MediaRevision(
        id=row.id,
        brand_media_id=row.brand_media_id,
        revision_number=row.revision_number,
        content=content,
        source=row.source,
        user_id=row.user_id,
        change_note=row.change_note,
        is_current=bool(row.is_current),
        created_at=(row.created_at.isoformat() if row.created_at else ""),
    )


def _activity_entity(row: MediaActivityORM) -> MediaActivity:
    return MediaActivity(
        id=row.id,
        brand_profile_id=row.brand_profile_id,
        brand_media_id=row.brand_media_id,
        user_id=row.user_id,
        action=row.action,
        description=row.description,
        details=row.details,
        source=row.source,
        created_at=(row.created_at.isoformat() if row.created_at else ""),
    )


class RevisionController:
    """Historique linéaire des révisions d'un asset, avec un unique pointeur courant.

    Revenir à une révision crée une nouvelle révision portant l'ancien contenu; aucune révision
    n'est ressuscitée ni supprimée individuellement.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def _asset(self, asset_id: str) -> BrandMediaORM:
        asset = self._session.get(BrandMediaORM, asset_id)
        if asset is None:
            raise NotFoundError("Media asset not found", details={"brand_media_id": asset_id})
        return asset

    def create_revision(
        self,
        asset_id: str,
        content: RevisionContent,
        source: MediaSource,
        author_id: str,
        note: str | None = None,
        *,
        action: str = "revision_created",
    ) -> MediaRevision:
        """Crée la révision `count + 1` et la désigne comme courante."""
        if source not in MEDIA_SOURCES:
            raise ValidationError(f"Unknown media source: {source}", details={"source": source})
        asset = self._asset(asset_id)
        number = self.get_revision_count(asset_id) + 1

        self._session.execute(
            update(MediaRevisionORM)
            .where(MediaRevisionORM.brand_media_id == asset_id)
            .values(is_current=False)
        )
        row = MediaRevisionORM(
            brand_media_id=asset_id,
            revision_number=number,
            is_current=True,
            source=source,
            user_id=author_id,
            change_note=note,
            metadata_=content.metadata,
            **{col: getattr(content, col) for col in _CONTENT_COLUMNS},
        )
        self._session.add(row)

        # L'asset reflète toujours le contenu de sa révision courante
        for col in _CONTENT_COLUMNS:
            setattr(asset, col, getattr(content, col))
        asset.source = source
        asset.updated_at = datetime.now(UTC)
        self._session.flush()

        self.log_activity(
            asset.brand_profile_id,
            author_id,
            action=action,
            description=f"Created revision #{number}" + (f": {note}" if note else ""),
            asset_id=asset_id,
            details={"revision_number": number},
            source=source,
        )
        log.info("revision_created", brand_media_id=asset_id, revision_number=number)
        return _revision_entity(row)

    def get_revisions(self, asset_id: str) -> list[MediaRevision]:
        stmt = (
            select(MediaRevisionORM)
            .where(MediaRevisionORM.brand_media_id == asset_id)
            .order_by(MediaRevisionORM.revision_number.asc())
        )
        return [_revision_entity(r) for r in self._session.execute(stmt).scalars().all()]

    def get_current_revision(self, asset_id: str) -> MediaRevision | None:
        stmt = select(MediaRevisionORM).where(
            MediaRevisionORM.brand_media_id == asset_id,
            MediaRevisionORM.is_current.is_(True),
        )
        row = self._session.execute(stmt).scalars().first()
        return _revision_entity(row) if row else None

    def get_revision_count(self, asset_id: str) -> int:
        stmt = select(func.count(MediaRevisionORM.id)).where(
            MediaRevisionORM.brand_media_id == asset_id
        )
        return int(self._session.execute(stmt).scalar() or 0)

    def get_revision(self, revision_id: int) -> MediaRevision:
        row = self._session.get(MediaRevisionORM, revision_id)
        if row is None:
            raise NotFoundError("Revision not found", details={"revision_id": revision_id})
        return _revision_entity(row)

    def revert_to_revision(self, revision_id: int, author_id: str) -> MediaRevision:
        """Crée une nouvelle révision courante avec le contenu de la révision ciblée."""
        target = self._session.get(MediaRevisionORM, revision_id)
        if target is None:
            raise NotFoundError("Revision not found", details={"revision_id": revision_id})
        content = RevisionContent(
            **{col: getattr(target, col) for col in _CONTENT_COLUMNS},
            metadata=target.metadata_,
        )
        return self.create_revision(
            target.brand_media_id,
            content,
            target.source,
            author_id,
            note=f"Reverted to revision {target.revision_number}",
            action="revision_reverted",
        )

    def log_activity(
        self,
        profile_id: str,
        user_id: str,
        *,
        action: str,
        description: str,
        asset_id: str | None = None,
        details: dict[str, Any] | None = None,
        source: str = "upload",
    ) -> MediaActivity:
        row = MediaActivityORM(
            brand_profile_id=profile_id,
            brand_media_id=asset_id,
            user_id=user_id,
            action=action,
            description=description,
            details=details,
            source=source,
        )
        self._session.add(row)
        self._session.flush()
        return _activity_entity(row)

    def get_activity(self, profile_id: str, limit: int = 50, offset: int = 0) -> list[MediaActivity]:
        """Journal d'activité d'un profil, le plus récent en premier."""
        stmt = (
            select(MediaActivityORM)
            .where(MediaActivityORM.brand_profile_id == profile_id)
            .order_by(MediaActivityORM.created_at.desc(), MediaActivityORM.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return [_activity_entity(r) for r in self._session.execute(stmt).scalars().all()]

    def get_asset_activity(self, asset_id: str) -> list[MediaActivity]:
        stmt = (
            select(MediaActivityORM)
            .where(MediaActivityORM.brand_media_id == asset_id)
            .order_by(MediaActivityORM.created_at.desc(), MediaActivityORM.id.desc())
        )
        return [_activity_entity(r) for r in self._session.execute(stmt).scalars().all()]
