"""Orchestrateur de l'assistant d'onboarding de marque.

Un tour se déroule en deux phases:

- `prepare_turn` (avant le flux): validation, contrôle de propriété, disponibilité du modèle,
  ajout du message utilisateur et assemblage des messages du modèle. Les erreurs sont levées.
- `stream_turn` (pendant le flux): relais des deltas, décompte d'usage, détection du marqueur de
  fin d'étape, extraction, puis évènement terminal. Les erreurs sont dégradées en évènement
  `error`. La persistance (réponse, étape, champs extraits) est confiée au runner de tâches de
  fond une fois l'évènement terminal émis.

Ordre des évènements d'un tour: contenu* -> usage? -> stepAdvance? -> brandDataExtracted? ->
error? -> done.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from backend.app.cost_controls import calculate_cost, record_usage
from backend.app.metrics import (
    EXTRACTION_FAILURES,
    ONBOARDING_STEP_ADVANCES,
    ONBOARDING_TURNS,
)
from backend.core.settings import Settings
from backend.domain.entities import Attachment, BrandProfile, OnboardingMessage
from backend.domain.errors import (
    BrandError,
    ExtractionFailure,
    ServiceUnavailable,
    ValidationError,
)
from backend.domain.extraction import ExtractedFieldSet, ExtractionService
from backend.domain.onboarding_prompts import (
    STEP_COMPLETE_MARKER,
    build_content_context,
    build_system_prompt,
)
from backend.domain.onboarding_steps import StepCatalog
from backend.infra.llm.base import LLM, ChatMessage, StreamChunk
from backend.infra.ops.background import BackgroundTasks
from backend.infra.repo.brand_assets_repo import BrandAssetsRepo
from backend.infra.repo.db import session_scope
from backend.infra.repo.field_version_repo import VersionLedger
from backend.infra.repo.message_repo import MessageRepo
from backend.infra.repo.profile_repo import ProfileRepo

log = structlog.get_logger(__name__)

STREAM_FAILED_MESSAGE = "Stream failed"
WELCOME_KICKOFF = (
    "I'm starting the brand onboarding process. Please welcome me and ask whether I have an "
    "existing brand or am starting from scratch."
)


# ---- Évènements du flux ----


@dataclass
class ContentDelta:
    content: str

    def to_payload(self) -> dict[str, Any]:
        return {"content": self.content}


@dataclass
class UsageReport:
    input_tokens: int
    output_tokens: int
    total_cost: float
    model: str
    display_name: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "usage": {
                "inputTokens": self.input_tokens,
                "outputTokens": self.output_tokens,
                "totalCost": self.total_cost,
                "model": self.model,
                "displayName": self.display_name,
            }
        }


@dataclass
class StepAdvance:
    step: str

    def to_payload(self) -> dict[str, Any]:
        return {"stepAdvance": self.step}


@dataclass
class BrandDataExtracted:
    fields: ExtractedFieldSet

    def to_payload(self) -> dict[str, Any]:
        return {"brandDataExtracted": self.fields}


@dataclass
class TurnError:
    message: str

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message}


@dataclass
class TurnDone:
    """Sentinelle terminale; exactement une par tour."""

    def to_payload(self) -> None:
        return None


TurnEvent = ContentDelta | UsageReport | StepAdvance | BrandDataExtracted | TurnError | TurnDone


# ---- Requête et tour préparé ----


@dataclass
class TurnRequest:
    profile_id: str
    message: str
    step: str
    attachments: list[Attachment] = field(default_factory=list)


@dataclass
class PreparedTurn:
    """Tout ce qu'il faut pour diffuser un tour, calculé avant l'ouverture du flux."""

    profile_id: str
    user_id: str
    step: str
    user_message: str
    model_messages: list[ChatMessage]
    recent_history: list[dict[str, str]]


@dataclass
class StartResult:
    profile: BrandProfile
    message: OnboardingMessage | None
    error: str | None = None


def strip_completion_marker(text: str) -> tuple[str, bool]:
    """Retire toutes les occurrences du marqueur et les blancs finaux; indique sa présence."""
    if STEP_COMPLETE_MARKER not in text:
        return text, False
    return text.replace(STEP_COMPLETE_MARKER, "").rstrip(), True


def _attachment_footnotes(attachments: list[Attachment]) -> str:
    return "\n".join(f"[Attached {a.type}: {a.name}]" for a in attachments)


def to_model_message(msg: OnboardingMessage) -> ChatMessage:
    """Convertit un message du transcript au format chat.

    Les images d'un message utilisateur deviennent des parties multimodales; les autres pièces
    jointes sont mentionnées en notes de bas de texte.
    """
    images = [a for a in msg.attachments if a.is_image]
    others = [a for a in msg.attachments if not a.is_image]
    if images and msg.role == "user":
        text = msg.content
        if others:
            text += "\n\n" + _attachment_footnotes(others)
        parts: list[dict[str, Any]] = [{"type": "text", "text": text}]
        for img in images:
            parts.append({"type": "image_url", "image_url": {"url": img.url, "detail": "auto"}})
        return {"role": "user", "content": parts}
    if msg.attachments:
        return {
            "role": msg.role,
            "content": msg.content + "\n\n" + _attachment_footnotes(images + others),
        }
    return {"role": msg.role, "content": msg.content}


class OnboardingOrchestrator:
    """Pilote les tours de conversation de l'assistant d'onboarding."""

    def __init__(
        self,
        session_factory: sessionmaker,
        llm: LLM,
        extractor: ExtractionService,
        steps: StepCatalog,
        background: BackgroundTasks,
        settings: Settings,
    ) -> None:
        self._session_factory = session_factory
        self.llm = llm
        self.extractor = extractor
        self.steps = steps
        self.background = background
        self.settings = settings

    # ---- Phase avant flux ----

    def prepare_turn(self, request: TurnRequest, user_id: str) -> PreparedTurn:
        """Valide la requête, enregistre le message utilisateur et assemble l'entrée du modèle."""
        missing = [
            name
            for name, value in (
                ("profileId", request.profile_id),
                ("message", request.message),
                ("step", request.step),
            )
            if not value or not str(value).strip()
        ]
        if missing:
            raise ValidationError("Missing required fields", details={"missing": missing})
        step = self.steps.get_step(request.step)
        if step is None:
            raise ValidationError(f"Unknown step: {request.step}", details={"step": request.step})

        with session_scope(self._session_factory) as session:
            ProfileRepo(session).get_owned(request.profile_id, user_id)
            if not self.llm.enabled:
                raise ServiceUnavailable("Text generation is not configured")

            messages = MessageRepo(session)
            current = messages.append(
                request.profile_id,
                user_id,
                "user",
                request.message,
                step=request.step,
                attachments=request.attachments or None,
            )
            transcript = messages.list_for_profile(request.profile_id)
            snapshot = VersionLedger(session).snapshot(request.profile_id)
            content = BrandAssetsRepo(session).content_context(request.profile_id)

        system_prompt = build_system_prompt(
            step,
            snapshot,
            build_content_context(content.texts, content.summary),
            terminal=self.steps.is_terminal(step.id),
        )
        conversation = [m for m in transcript if m.role in ("user", "assistant")]
        model_messages: list[ChatMessage] = [{"role": "system", "content": system_prompt}]
        model_messages.extend(to_model_message(m) for m in conversation)

        prior = [m for m in conversation if m.id != current.id]
        turns = self.settings.EXTRACTION_HISTORY_TURNS
        recent = prior[-turns:] if turns > 0 else []

        log.info(
            "onboarding_turn_started",
            profile_id=request.profile_id,
            step=request.step,
            history=len(conversation),
        )
        return PreparedTurn(
            profile_id=request.profile_id,
            user_id=user_id,
            step=request.step,
            user_message=request.message,
            model_messages=model_messages,
            recent_history=[{"role": m.role, "content": m.content} for m in recent],
        )

    # ---- Phase de flux ----

    async def stream_turn(self, prepared: PreparedTurn) -> AsyncIterator[TurnEvent]:
        """Diffuse un tour préparé.

        Si le consommateur arrête l'itération avant l'évènement terminal, le flux amont est
        fermé et rien n'est persisté.
        """
        model = self.settings.ONBOARDING_CHAT_MODEL
        upstream = self.llm.stream(
            prepared.model_messages,
            model=model,
            temperature=self.settings.ONBOARDING_CHAT_TEMPERATURE,
            max_tokens=self.settings.ONBOARDING_CHAT_MAX_TOKENS,
        )
        buffer: list[str] = []
        usage_chunk: StreamChunk | None = None
        failed = False
        persist = None
        started = time.perf_counter()
        try:
            try:
                async for chunk in upstream:
                    if chunk.type == "content" and chunk.content:
                        buffer.append(chunk.content)
                        yield ContentDelta(chunk.content)
                    elif chunk.type == "usage" and chunk.usage is not None:
                        usage_chunk = chunk
            except Exception as exc:  # noqa: BLE001 - dégradé en évènement du flux
                failed = True
                log.error(
                    "onboarding_stream_failed",
                    profile_id=prepared.profile_id,
                    step=prepared.step,
                    error=str(exc),
                    received_chars=sum(len(b) for b in buffer),
                )

            if usage_chunk is not None:
                cost = calculate_cost(
                    usage_chunk.model or model,
                    usage_chunk.usage.prompt_tokens,
                    usage_chunk.usage.completion_tokens,
                )
                record_usage(cost)
                yield UsageReport(
                    input_tokens=cost.input_tokens,
                    output_tokens=cost.output_tokens,
                    total_cost=cost.total_cost,
                    model=cost.model,
                    display_name=cost.display_name,
                )

            if failed:
                ONBOARDING_TURNS.labels(step=prepared.step, outcome="failed").inc()
                yield TurnError(STREAM_FAILED_MESSAGE)
                yield TurnDone()
                return

            clean, marker_found = strip_completion_marker("".join(buffer))
            next_step = self.steps.next_step(prepared.step) if marker_found else None
            if next_step is not None:
                ONBOARDING_STEP_ADVANCES.labels(from_step=prepared.step, to_step=next_step).inc()
                yield StepAdvance(next_step)

            extracted = await self._extract(prepared, clean)
            if extracted:
                yield BrandDataExtracted(extracted)

            ONBOARDING_TURNS.labels(step=prepared.step, outcome="completed").inc()
            log.info(
                "onboarding_turn_completed",
                profile_id=prepared.profile_id,
                step=prepared.step,
                next_step=next_step,
                extracted=sorted(extracted or {}),
                duration_s=round(time.perf_counter() - started, 3),
            )
            if clean or next_step is not None or extracted:
                persist = (clean, next_step, extracted)
            yield TurnDone()
        finally:
            aclose = getattr(upstream, "aclose", None)
            if aclose is not None:
                await aclose()
            if persist is not None:
                self.background.spawn(
                    self.persist_turn(prepared, *persist), name="onboarding_persist"
                )

    async def _extract(self, prepared: PreparedTurn, clean: str) -> ExtractedFieldSet | None:
        transcript = [
            *prepared.recent_history,
            {"role": "user", "content": prepared.user_message},
        ]
        if clean:
            transcript.append({"role": "assistant", "content": clean})
        try:
            return await self.extractor.extract(prepared.step, transcript)
        except ExtractionFailure as exc:
            error = exc.message
        except Exception as exc:  # noqa: BLE001 - le tour se termine sans extraction
            error = f"{type(exc).__name__}: {exc}"
        EXTRACTION_FAILURES.labels(step=prepared.step).inc()
        log.warning(
            "extraction_failed",
            profile_id=prepared.profile_id,
            step=prepared.step,
            error=error,
        )
        return None

    # ---- Persistance différée ----

    async def persist_turn(
        self,
        prepared: PreparedTurn,
        clean: str,
        next_step: str | None,
        extracted: ExtractedFieldSet | None,
    ) -> None:
        """Enregistre la réponse, avance l'étape et journalise les champs extraits.

        Chaque champ est committé séparément: l'échec de l'un n'empêche pas les autres.
        """
        with session_scope(self._session_factory) as session:
            if clean:
                MessageRepo(session).append(
                    prepared.profile_id, prepared.user_id, "assistant", clean, step=prepared.step
                )
            if next_step is not None:
                ProfileRepo(session).set_step(
                    prepared.profile_id, next_step, completed=self.steps.is_terminal(next_step)
                )
                log.info(
                    "onboarding_step_advanced",
                    profile_id=prepared.profile_id,
                    from_step=prepared.step,
                    to_step=next_step,
                )

        reason = f"Extracted from onboarding chat ({prepared.step} step)"
        for name, value in (extracted or {}).items():
            try:
                with session_scope(self._session_factory) as session:
                    VersionLedger(
                        session, max_retries=self.settings.VERSION_ALLOC_MAX_RETRIES
                    ).update_field_with_version(
                        prepared.profile_id,
                        name,
                        value,
                        "ai",
                        user_id=prepared.user_id,
                        reason=reason,
                    )
            except (BrandError, SQLAlchemyError) as exc:
                log.warning(
                    "field_commit_failed",
                    profile_id=prepared.profile_id,
                    field=name,
                    error=str(exc),
                )

    # ---- Démarrage ----

    async def start_onboarding(self, user_id: str) -> StartResult:
        """Crée un profil et génère le message d'accueil.

        Sans fournisseur configuré, ou si la génération échoue, le profil est tout de même
        retourné avec un message d'erreur.
        """
        first = self.steps.first
        with session_scope(self._session_factory) as session:
            profile = ProfileRepo(session).create(user_id, first_step=first.id)

        if not self.llm.enabled:
            return StartResult(profile=profile, message=None, error="No AI provider configured")

        messages: list[ChatMessage] = [
            {
                "role": "system",
                "content": build_system_prompt(first, terminal=self.steps.is_terminal(first.id)),
            },
            {"role": "user", "content": WELCOME_KICKOFF},
        ]
        parts: list[str] = []
        try:
            async for chunk in self.llm.stream(
                messages,
                model=self.settings.ONBOARDING_CHAT_MODEL,
                temperature=self.settings.ONBOARDING_CHAT_TEMPERATURE,
                max_tokens=self.settings.WELCOME_MAX_TOKENS,
            ):
                if chunk.type == "content" and chunk.content:
                    parts.append(chunk.content)
        except Exception as exc:  # noqa: BLE001 - le profil reste utilisable
            log.error("welcome_generation_failed", profile_id=profile.id, error=str(exc))
            return StartResult(
                profile=profile, message=None, error="Failed to generate welcome message"
            )

        welcome, _ = strip_completion_marker("".join(parts))
        with session_scope(self._session_factory) as session:
            saved = MessageRepo(session).append(
                profile.id, user_id, "assistant", welcome, step=first.id
            )
        return StartResult(profile=profile, message=saved)

    # ---- Lecture ----

    def get_profile(self, profile_id: str, user_id: str) -> tuple[BrandProfile, int]:
        """Profil possédé par l'utilisateur et son pourcentage d'avancement."""
        with session_scope(self._session_factory) as session:
            profile = ProfileRepo(session).get_owned(profile_id, user_id)
        return profile, self.steps.progress_percent(profile.onboarding_step)

    def get_messages(
        self, profile_id: str, user_id: str, step: str | None = None
    ) -> list[OnboardingMessage]:
        with session_scope(self._session_factory) as session:
            ProfileRepo(session).get_owned(profile_id, user_id)
            return MessageRepo(session).list_for_profile(profile_id, step=step)


__all__ = [
    "BrandDataExtracted",
    "ContentDelta",
    "OnboardingOrchestrator",
    "PreparedTurn",
    "StartResult",
    "StepAdvance",
    "TurnDone",
    "TurnError",
    "TurnEvent",
    "TurnRequest",
    "UsageReport",
    "strip_completion_marker",
    "to_model_message",
]
