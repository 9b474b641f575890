"""
Conteneur d'injection de dépendances et configuration application.

Instancie les composants centraux (settings, moteur SQL, client LLM, catalogue d'étapes,
runner de tâches de fond, orchestrateur) et les expose via `Container`. L'application en garde
une instance dans `app.state.container`; les tests en construisent une avec leurs doublures.
"""

from __future__ import annotations

from sqlalchemy.engine import Engine

from backend.core.settings import Settings, get_settings
from backend.domain.chat_orchestrator import OnboardingOrchestrator
from backend.domain.extraction import ExtractionService
from backend.domain.onboarding_steps import DEFAULT_STEP_CATALOG, StepCatalog
from backend.infra.llm.base import LLM
from backend.infra.llm.openai_client import OpenAILLM
from backend.infra.ops.background import BackgroundTasks
from backend.infra.repo.db import get_engine, get_session_factory
from backend.infra.repo.models import Base


class Container:
    """Assemble les dépendances de l'application."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        engine: Engine | None = None,
        llm: LLM | None = None,
        steps: StepCatalog | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.engine = engine or get_engine(self.settings.DATABASE_URL)
        if self.settings.DB_AUTO_CREATE:
            Base.metadata.create_all(self.engine)
        self.session_factory = get_session_factory(self.engine)
        self.llm = llm or OpenAILLM(api_key=self.settings.OPENAI_API_KEY)
        self.steps = steps or DEFAULT_STEP_CATALOG
        self.background = BackgroundTasks()
        self.extractor = ExtractionService(
            self.llm,
            self.steps,
            model=self.settings.EXTRACTION_MODEL,
            temperature=self.settings.EXTRACTION_TEMPERATURE,
            max_tokens=self.settings.EXTRACTION_MAX_TOKENS,
        )
        self.orchestrator = OnboardingOrchestrator(
            self.session_factory,
            self.llm,
            self.extractor,
            self.steps,
            self.background,
            self.settings,
        )

    @property
    def storage_backend(self) -> str:
        return self.engine.dialect.name
