"""Routes des révisions média et du journal d'activité des assets."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from backend.api.deps import get_current_user_id, get_session
from backend.api.schemas import MediaActivityOut, MediaRevisionOut, RevisionRequest
from backend.core.http_constants import HTTP_CREATED
from backend.domain.entities import RevisionContent
from backend.domain.errors import ValidationError
from backend.infra.repo.brand_assets_repo import BrandAssetsRepo
from backend.infra.repo.media_revision_repo import RevisionController
from backend.infra.repo.profile_repo import ProfileRepo

router = APIRouter(prefix="/brand/assets", tags=["assets"])


def _check_asset_owner(session: Session, asset_id: str, user_id: str) -> None:
    owner = BrandAssetsRepo(session).media_owner(asset_id)
    ProfileRepo(session).get_owned(owner, user_id)


@router.get("/revisions")
def list_revisions(
    brand_media_id: str = Query(..., alias="brandMediaId"),
    current: bool = Query(False),
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Révisions d'un asset par numéro croissant, ou seulement la courante."""
    _check_asset_owner(session, brand_media_id, user_id)
    controller = RevisionController(session)
    if current:
        rev = controller.get_current_revision(brand_media_id)
        return {"revision": MediaRevisionOut.model_validate(rev) if rev else None}
    revisions = controller.get_revisions(brand_media_id)
    return {
        "revisions": [MediaRevisionOut.model_validate(r) for r in revisions],
        "count": len(revisions),
    }


@router.post("/revisions")
def post_revision(
    payload: RevisionRequest,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    controller = RevisionController(session)

    if payload.action == "revert":
        if payload.revision_id is None:
            raise ValidationError("revisionId is required", details={"field": "revisionId"})
        target = controller.get_revision(payload.revision_id)
        _check_asset_owner(session, target.brand_media_id, user_id)
        revision = controller.revert_to_revision(payload.revision_id, user_id)
        return {"revision": MediaRevisionOut.model_validate(revision)}

    if not payload.brand_media_id:
        raise ValidationError("brandMediaId is required", details={"field": "brandMediaId"})
    _check_asset_owner(session, payload.brand_media_id, user_id)
    content = RevisionContent(
        url=payload.url,
        storage_key=payload.storage_key,
        mime_type=payload.mime_type,
        file_size=payload.file_size,
        width=payload.width,
        height=payload.height,
        duration_seconds=payload.duration_seconds,
        metadata=payload.metadata,
    )
    revision = controller.create_revision(
        payload.brand_media_id, content, payload.source, user_id, payload.change_note
    )
    body = {"revision": MediaRevisionOut.model_validate(revision)}
    return JSONResponse(status_code=HTTP_CREATED, content=jsonable_encoder(body))


@router.get("/activity/{profile_id}")
def list_activity(
    profile_id: str,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    ProfileRepo(session).get_owned(profile_id, user_id)
    entries = RevisionController(session).get_activity(profile_id, limit=limit, offset=offset)
    return {"activity": [MediaActivityOut.model_validate(a) for a in entries]}
