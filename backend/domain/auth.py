"""
Jetons d'accès des utilisateurs de l'onboarding.

Les comptes et la connexion sont gérés par un service externe. Ici on ne fait que lire l'en-tête
`Authorization: Bearer <jwt>` et valider le jeton; le claim `sub` porte l'identifiant utilisateur
qui sert ensuite de clé de propriété sur les profils de marque. `create_access_token` sert aux
tests et aux outils locaux.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError
from pydantic import BaseModel, ValidationError

BEARER_PREFIX = "bearer "


class TokenData(BaseModel):
    """Claims utiles d'un jeton d'accès."""

    sub: str
    email: str | None = None


def create_access_token(
    secret: str, alg: str, expires_min: int, payload: dict[str, Any]
) -> str:
    claims = {**payload, "exp": datetime.now(UTC) + timedelta(minutes=expires_min)}
    return jwt.encode(claims, secret, algorithm=alg)


def bearer_token(authorization: str | None) -> str | None:
    """Extrait le jeton d'un en-tête `Authorization`, ou None si le schéma n'est pas Bearer."""
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def decode_token(token: str, secret: str, alg: str) -> TokenData | None:
    """Retourne les claims d'un jeton valide; None si signature, expiration ou `sub` invalides."""
    try:
        claims = jwt.decode(token, secret, algorithms=[alg])
        return TokenData.model_validate(claims)
    except (InvalidTokenError, ValidationError):
        return None
