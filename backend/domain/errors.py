"""Exceptions métier du backend de marque.

Les erreurs levées avant l'ouverture d'un flux (validation, ressource introuvable, service de
génération indisponible) remontent à l'appelant et sont traduites en enveloppe HTTP par
`backend.apigw.errors`. Les erreurs survenant pendant le flux sont dégradées en évènement `error`
dans le flux lui-même.
"""

from __future__ import annotations

from typing import Any


class BrandError(Exception):
    """Erreur de base avec code stable et statut HTTP associé."""

    code = "BRAND_ERROR"
    status_code = 500

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(BrandError):
    """Champ inconnu, étape inconnue ou requête incomplète."""

    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(BrandError):
    """Profil, version ou révision introuvable (ou appartenant à un autre utilisateur)."""

    code = "NOT_FOUND"
    status_code = 404


class ServiceUnavailable(BrandError):
    """Aucun fournisseur de génération de texte configuré."""

    code = "SERVICE_UNAVAILABLE"
    status_code = 503


class ConcurrentVersionConflict(BrandError):
    """Allocation de numéro de version impossible après plusieurs tentatives."""

    code = "CONFLICT"
    status_code = 409


class StreamFailure(BrandError):
    """Échec de la génération après le début du flux (jamais levée hors du flux)."""

    code = "STREAM_FAILED"
    status_code = 502


class ExtractionFailure(BrandError):
    """Échec réseau de l'appel d'extraction; récupéré localement."""

    code = "EXTRACTION_FAILED"
    status_code = 502
