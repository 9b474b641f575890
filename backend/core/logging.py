"""Configuration de logging basée sur structlog.

Objectif du module
------------------
- Logs console lisibles en développement, une ligne JSON par événement ailleurs.
- Propager les variables de contexte (request_id, profile_id) liées par les middlewares et
  l'orchestrateur, y compris dans les tâches de fond.
- Aligner le niveau des loggers stdlib (uvicorn, sqlalchemy) sur celui de l'application.
"""

import logging
import sys

import structlog

# Bruyants au niveau DEBUG; on les garde à WARNING sauf demande explicite.
_QUIET_LOGGERS = ("sqlalchemy.engine", "httpx", "openai")


def _level_number(level: str) -> int:
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.DEBUG


def setup_logging(level: str = "DEBUG", json_logs: bool = False) -> None:
    """Configure structlog et le logging stdlib."""
    min_level = _level_number(level)
    logging.basicConfig(stream=sys.stdout, level=min_level, format="%(message)s")
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(min_level, logging.WARNING))

    renderer = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="ISO", utc=True),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )
