"""Transcript de l'assistant d'onboarding (append-only, ordonné par date de création)."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.domain.entities import Attachment, MessageRole, OnboardingMessage
from backend.infra.repo.models import OnboardingMessageORM


def _to_entity(row: OnboardingMessageORM) -> OnboardingMessage:
    return OnboardingMessage(
        id=row.id,
        brand_profile_id=row.brand_profile_id,
        user_id=row.user_id,
        role=row.role,
        content=row.content,
        step=row.step,
        created_at=(row.created_at.isoformat() if row.created_at else ""),
        attachments=[Attachment(**a) for a in (row.attachments or [])],
        metadata=row.metadata_,
    )


class MessageRepo:
    """Ajout et lecture des messages d'un profil."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def append(
        self,
        profile_id: str,
        user_id: str,
        role: MessageRole,
        content: str,
        *,
        step: str | None = None,
        attachments: list[Attachment] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> OnboardingMessage:
        row = OnboardingMessageORM(
            brand_profile_id=profile_id,
            user_id=user_id,
            role=role,
            content=content,
            step=step,
            attachments=(
                [{"type": a.type, "name": a.name, "url": a.url} for a in attachments]
                if attachments
                else None
            ),
            metadata_=metadata,
        )
        self._session.add(row)
        self._session.flush()
        return _to_entity(row)

    def list_for_profile(self, profile_id: str, step: str | None = None) -> list[OnboardingMessage]:
        """Messages en ordre chronologique (date de création puis id)."""
        stmt = select(OnboardingMessageORM).where(
            OnboardingMessageORM.brand_profile_id == profile_id
        )
        if step is not None:
            stmt = stmt.where(OnboardingMessageORM.step == step)
        stmt = stmt.order_by(OnboardingMessageORM.created_at.asc(), OnboardingMessageORM.id.asc())
        return [_to_entity(r) for r in self._session.execute(stmt).scalars().all()]
