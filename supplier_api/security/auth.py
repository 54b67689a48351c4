from __future__ import annotations

import logging
import uuid

from fastapi import HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from supplier_api.models.identity import AppUser
from supplier_api.security.tokens import CallerClaims, CallerTokenValidator, TokenValidationError
from supplier_api.settings import Settings

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"
BEARER_PREFIX = "Bearer"


def extract_bearer_token(request: Request) -> str | None:
    raw = request.headers.get(AUTHORIZATION_HEADER)
    if not raw:
        logger.info("Missing Authorization header path=%s method=%s", request.url.path, request.method)
        return None

    prefix = f"{BEARER_PREFIX} "
    if not raw.startswith(prefix):
        logger.warning("Invalid Authorization header format path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {AUTHORIZATION_HEADER}. Expected '{BEARER_PREFIX} <token>'.",
        )

    token = raw[len(prefix) :].strip()
    if not token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {AUTHORIZATION_HEADER}. Missing token after '{BEARER_PREFIX}'.",
        )
    return token


def resolve_caller(token: str, settings: Settings) -> CallerClaims:
    """
    Turn a bearer token into caller claims.

    - With ``APP_JWT_SECRET``: validate the JWT and read ``sub`` / ``roles``.
    - Without it (demo): the token itself is the principal id.
    """

    if not settings.jwt_secret:
        return CallerClaims(principal_id=token)

    try:
        return CallerTokenValidator(settings).validate(token)
    except TokenValidationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc


def load_principal(db: Session, principal_id: str) -> AppUser:
    try:
        key = uuid.UUID(principal_id)
    except ValueError as exc:
        logger.warning("Principal id is not a UUID")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid principal") from exc

    principal = db.scalars(select(AppUser).where(AppUser.id == key)).first()
    if principal is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown or deleted principal")
    return principal
