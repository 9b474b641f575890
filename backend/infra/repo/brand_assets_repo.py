"""Lecture des textes de marque et inventaire des médias, plus création d'assets."""

from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backend.domain.entities import AssetSummary, BrandContentContext, BrandText, MediaType
from backend.domain.errors import NotFoundError
from backend.infra.repo.models import BrandMediaORM, BrandTextORM


class BrandAssetsRepo:
    """Contenus complémentaires d'un profil (textes + médias)."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_texts(self, profile_id: str) -> list[BrandText]:
        stmt = (
            select(BrandTextORM)
            .where(BrandTextORM.brand_profile_id == profile_id)
            .order_by(BrandTextORM.category, BrandTextORM.sort_order, BrandTextORM.key)
        )
        return [
            BrandText(
                id=r.id,
                brand_profile_id=r.brand_profile_id,
                category=r.category,
                key=r.key,
                label=r.label,
                value=r.value,
                language=r.language,
                sort_order=r.sort_order,
            )
            for r in self._session.execute(stmt).scalars().all()
        ]

    def add_text(
        self, profile_id: str, category: str, key: str, label: str, value: str
    ) -> BrandText:
        row = BrandTextORM(
            id=str(uuid.uuid4()),
            brand_profile_id=profile_id,
            category=category,
            key=key,
            label=label,
            value=value,
        )
        self._session.add(row)
        self._session.flush()
        return BrandText(
            id=row.id,
            brand_profile_id=profile_id,
            category=category,
            key=key,
            label=label,
            value=value,
        )

    def summary(self, profile_id: str) -> AssetSummary:
        counts = dict(
            self._session.execute(
                select(BrandMediaORM.media_type, func.count(BrandMediaORM.id))
                .where(BrandMediaORM.brand_profile_id == profile_id)
                .group_by(BrandMediaORM.media_type)
            ).all()
        )
        text_count = self._session.execute(
            select(func.count(BrandTextORM.id)).where(BrandTextORM.brand_profile_id == profile_id)
        ).scalar()
        return AssetSummary(
            text_count=int(text_count or 0),
            image_count=int(counts.get("image", 0)),
            audio_count=int(counts.get("audio", 0)),
            video_count=int(counts.get("video", 0)),
        )

    def content_context(self, profile_id: str) -> BrandContentContext:
        return BrandContentContext(
            texts=self.list_texts(profile_id), summary=self.summary(profile_id)
        )

    def create_media(self, profile_id: str, media_type: MediaType, name: str) -> str:
        """Crée un asset vide (sans révision); retourne son identifiant."""
        row = BrandMediaORM(
            id=str(uuid.uuid4()),
            brand_profile_id=profile_id,
            media_type=media_type,
            name=name,
        )
        self._session.add(row)
        self._session.flush()
        return row.id

    def media_owner(self, asset_id: str) -> str:
        """Profil propriétaire d'un asset."""
        row = self._session.get(BrandMediaORM, asset_id)
        if row is None:
            raise NotFoundError("Media asset not found", details={"brand_media_id": asset_id})
        return row.brand_profile_id
