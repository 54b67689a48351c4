"""
Validate signed bearer tokens (JWT) and extract caller claims.

Before any claim is trusted the token signature, expiry/not-before and, when
configured, issuer and audience are verified. Only then is a CallerClaims
built for the rest of the app.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

import jwt

from supplier_api.settings import Settings

logger = logging.getLogger(__name__)


class TokenValidationError(Exception):
    """Raised when token validation fails. Do not log the token."""


@dataclass(frozen=True)
class CallerClaims:
    """Identity asserted by a validated token."""

    principal_id: str
    roles: tuple[str, ...] = ()


def _extract_claims(payload: dict[str, Any]) -> CallerClaims:
    """
    Build CallerClaims from a validated payload.

    * ``sub`` (or ``uid``) is the principal id.
    * ``roles`` is an optional list (or single string) of externally resolved
      role codes; they are added to the roles found in the database.
    """

    principal_id = payload.get("sub") or payload.get("uid") or ""
    if not principal_id:
        raise TokenValidationError("Invalid token: missing subject")

    roles: list[str] = []
    raw_roles = payload.get("roles")
    if isinstance(raw_roles, list):
        roles = [str(r) for r in raw_roles]
    elif isinstance(raw_roles, str):
        roles = [raw_roles]

    return CallerClaims(principal_id=str(principal_id), roles=tuple(roles))


class CallerTokenValidator:
    """Validates HMAC/RSA-signed JWTs with the key and options from Settings."""

    def __init__(self, settings: Settings) -> None:
        if not settings.jwt_secret:
            raise ValueError("APP_JWT_SECRET must be set to validate tokens")
        self._settings = settings

    def validate(self, token: str) -> CallerClaims:
        s = self._settings
        try:
            payload = jwt.decode(
                token,
                s.jwt_secret,
                algorithms=[s.jwt_algorithm],
                audience=s.jwt_audience,
                issuer=s.jwt_issuer,
                leeway=s.clock_skew_seconds,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_nbf": True,
                    "verify_iss": s.jwt_issuer is not None,
                    "verify_aud": s.jwt_audience is not None,
                },
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Token expired")
            raise TokenValidationError("Token expired") from e
        except jwt.InvalidIssuerError as e:
            logger.info("Token invalid issuer")
            raise TokenValidationError("Invalid token: issuer") from e
        except jwt.InvalidAudienceError as e:
            logger.info("Token invalid audience")
            raise TokenValidationError("Invalid token: audience") from e
        except jwt.InvalidTokenError as e:
            logger.info("Token invalid: %s", type(e).__name__)
            raise TokenValidationError("Invalid token") from e

        return _extract_claims(payload)
