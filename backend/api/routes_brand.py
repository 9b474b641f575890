"""
Routes d'édition et d'historique des champs de marque.

Chaque écriture passe par le journal de versions; un retour arrière ajoute une version et ne
réécrit jamais l'historique.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.api.deps import get_container, get_current_user_id, get_session
from backend.api.schemas import (
    FieldVersionOut,
    ProfileOut,
    RevertFieldRequest,
    UpdateFieldRequest,
)
from backend.core.container import Container
from backend.infra.repo.field_version_repo import VersionLedger
from backend.infra.repo.profile_repo import ProfileRepo

router = APIRouter(prefix="/brand", tags=["brand"])


def _ledger(session: Session, container: Container) -> VersionLedger:
    return VersionLedger(session, max_retries=container.settings.VERSION_ALLOC_MAX_RETRIES)


def _profile_body(session: Session, container: Container, profile_id: str, user_id: str) -> dict:
    profile = ProfileRepo(session).get_owned(profile_id, user_id)
    progress = container.steps.progress_percent(profile.onboarding_step)
    return {"profile": ProfileOut.from_profile(profile, progress)}


@router.get("/field-history/{profile_id}/{field_name}")
def field_history(
    profile_id: str,
    field_name: str,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
    container: Container = Depends(get_container),
):
    ProfileRepo(session).get_owned(profile_id, user_id)
    versions = _ledger(session, container).get_field_history(profile_id, field_name)
    return {"versions": [FieldVersionOut.model_validate(v) for v in versions]}


@router.get("/history/{profile_id}")
def history(
    profile_id: str,
    limit: int | None = Query(None, ge=1, le=500),
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
    container: Container = Depends(get_container),
):
    ProfileRepo(session).get_owned(profile_id, user_id)
    versions = _ledger(session, container).get_all_history(profile_id, limit=limit)
    return {"versions": [FieldVersionOut.model_validate(v) for v in versions]}


@router.api_route("/update-field", methods=["POST", "PATCH"])
def update_field(
    payload: UpdateFieldRequest,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
    container: Container = Depends(get_container),
):
    """Écriture manuelle d'un champ; retourne le profil à jour."""
    ProfileRepo(session).get_owned(payload.profile_id, user_id)
    _ledger(session, container).update_field_with_version(
        payload.profile_id,
        payload.field_name,
        payload.new_value,
        payload.change_source,
        user_id=user_id,
        reason=payload.change_reason,
    )
    return _profile_body(session, container, payload.profile_id, user_id)


@router.post("/revert-field")
def revert_field(
    payload: RevertFieldRequest,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
    container: Container = Depends(get_container),
):
    ProfileRepo(session).get_owned(payload.profile_id, user_id)
    _ledger(session, container).revert_field(
        payload.profile_id, payload.field_name, payload.version_id, user_id=user_id
    )
    return _profile_body(session, container, payload.profile_id, user_id)
