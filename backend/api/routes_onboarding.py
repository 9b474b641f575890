"""
Routes de l'onboarding conversationnel.

- `POST /onboarding/start` crée un profil et son message d'accueil.
- `POST /onboarding/chat` diffuse la réponse de l'assistant en Server-Sent Events.
- `GET /onboarding/messages/{profile_id}` et `GET /onboarding/profile/{profile_id}` relisent
  l'état persistant.

Les erreurs de préparation (message vide, profil inconnu, fournisseur absent) sont levées avant
l'ouverture du flux et deviennent des réponses JSON via les handlers de `apigw.errors`.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from backend.api.deps import get_container, get_current_user_id
from backend.api.schemas import ChatRequest, MessageOut, ProfileOut
from backend.core.container import Container
from backend.core.http_constants import SSE_HEADERS, SSE_MEDIA_TYPE
from backend.domain.chat_orchestrator import TurnEvent, TurnRequest
from backend.domain.entities import Attachment

router = APIRouter(prefix="/onboarding", tags=["onboarding"])

SSE_DONE_FRAME = "data: [DONE]\n\n"


def sse_frame(event: TurnEvent) -> str:
    payload = event.to_payload()
    if payload is None:
        return SSE_DONE_FRAME
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


async def sse_stream(events: AsyncIterator[TurnEvent]) -> AsyncIterator[str]:
    """Encode les événements d'un tour; ferme le générateur amont si le client part."""
    try:
        async for event in events:
            yield sse_frame(event)
    finally:
        await events.aclose()


@router.post("/start")
async def start_onboarding(
    user_id: str = Depends(get_current_user_id),
    container: Container = Depends(get_container),
):
    result = await container.orchestrator.start_onboarding(user_id)
    progress = container.steps.progress_percent(result.profile.onboarding_step)
    body = {
        "profile": ProfileOut.from_profile(result.profile, progress),
        "message": MessageOut.model_validate(result.message) if result.message else None,
    }
    if result.error:
        body["error"] = result.error
    return body


@router.post("/chat")
async def chat(
    payload: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    container: Container = Depends(get_container),
):
    """Un tour de conversation, diffusé en `text/event-stream`."""
    request = TurnRequest(
        profile_id=payload.profile_id,
        message=payload.message,
        step=payload.step,
        attachments=[Attachment(type=a.type, name=a.name, url=a.url) for a in payload.attachments],
    )
    prepared = container.orchestrator.prepare_turn(request, user_id)
    return StreamingResponse(
        sse_stream(container.orchestrator.stream_turn(prepared)),
        media_type=SSE_MEDIA_TYPE,
        headers=SSE_HEADERS,
    )


@router.get("/messages/{profile_id}")
def list_messages(
    profile_id: str,
    step: str | None = Query(None),
    user_id: str = Depends(get_current_user_id),
    container: Container = Depends(get_container),
):
    messages = container.orchestrator.get_messages(profile_id, user_id, step=step)
    return {"messages": [MessageOut.model_validate(m) for m in messages]}


@router.get("/profile/{profile_id}")
def get_profile(
    profile_id: str,
    user_id: str = Depends(get_current_user_id),
    container: Container = Depends(get_container),
):
    profile, progress = container.orchestrator.get_profile(profile_id, user_id)
    return {"profile": ProfileOut.from_profile(profile, progress), "progressPercent": progress}
