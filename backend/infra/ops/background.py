"""Exécution différée de travaux après la réponse, avec suivi pour drain à l'arrêt.

Les tâches sont des `asyncio.Task` conservées jusqu'à leur fin. Une tâche qui échoue est
journalisée et comptée, jamais relancée vers l'appelant (persistance best-effort, au plus une
fois). `drain()` attend les tâches en cours; il est appelé à l'arrêt de l'application et par
les tests qui vérifient la persistance.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

import structlog

from backend.app.metrics import BACKGROUND_TASK_FAILURES

log = structlog.get_logger(__name__)


class BackgroundTasks:
    """Registre des tâches de fond en cours."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str = "background") -> asyncio.Task:
        """Planifie `coro` sur la boucle courante et la suit jusqu'à sa fin."""
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            log.warning("background_task_cancelled", task=task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            BACKGROUND_TASK_FAILURES.labels(name=task.get_name()).inc()
            log.error(
                "background_task_failed",
                task=task.get_name(),
                error=str(exc),
                exc_info=exc,
            )

    async def drain(self, timeout: float | None = None) -> bool:
        """Attend la fin des tâches en cours; retourne False si le délai est dépassé."""
        pending = set(self._tasks)
        if not pending:
            return True
        _done, still_pending = await asyncio.wait(pending, timeout=timeout)
        if still_pending:
            log.warning("background_drain_timeout", pending=len(still_pending))
            return False
        return True
