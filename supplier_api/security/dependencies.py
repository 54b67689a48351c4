from __future__ import annotations

from collections.abc import Callable
from enum import Enum
import logging
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from supplier_api.abac import (
    InvalidResource,
    PolicyEvaluator,
    SubjectAttributes,
    SubjectResolutionError,
    build_context_attributes,
    build_resource_attributes,
    build_subject_attributes,
)
from supplier_api.abac.attributes import as_key
from supplier_api.db.session import get_db
from supplier_api.models.identity import AppUser
from supplier_api.security.auth import extract_bearer_token, load_principal, resolve_caller
from supplier_api.security.context import AuthorizedRequest
from supplier_api.settings import Settings, get_settings

logger = logging.getLogger(__name__)

ResourceLoader = Callable[[Request, Session], Any]


def get_policy_evaluator(request: Request) -> PolicyEvaluator:
    evaluator = getattr(request.app.state, "policy_evaluator", None)
    if evaluator is None:
        raise RuntimeError("Policy evaluator not configured. Was the app built with create_app()?")
    return evaluator


def get_current_principal(
    request: Request,
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
) -> AppUser:
    token = extract_bearer_token(request)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    claims = resolve_caller(token, settings)
    principal = load_principal(db, claims.principal_id)
    request.state.caller_roles = claims.roles
    return principal


def get_subject(
    request: Request,
    principal: AppUser = Depends(get_current_principal),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
) -> SubjectAttributes:
    try:
        subject = build_subject_attributes(
            db,
            principal,
            explicit_roles=getattr(request.state, "caller_roles", ()),
            fail_closed=settings.abac_fail_closed_on_lookup_error,
        )
    except SubjectResolutionError as exc:
        logger.warning("ABAC: denying request, subject roles unresolved principal=%s", principal.id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied") from exc

    request.state.subject = subject
    return subject


def require_permission(
    resource_type: str | Enum,
    action: str | Enum,
    load_resource: ResourceLoader | None = None,
) -> Callable[..., AuthorizedRequest]:
    """
    Build a route dependency that enforces one ABAC check.

    Steps per request:
    1. Resolve the caller and build SubjectAttributes (401 when unauthenticated).
    2. Load the target record with ``load_resource`` when given (404 when missing).
    3. Build resource and context attributes, ask the PolicyEvaluator.
    4. Deny -> 403. The evaluator's reason is only returned when
       ``APP_EXPOSE_DENIAL_REASONS`` is on; it is always logged.

    Usage:
        @router.get("/suppliers/{supplier_id}")
        def get_supplier(access: AuthorizedRequest = Depends(require_permission("supplier", "view", load_supplier))):
            return access.resource
    """

    resource_type = as_key(resource_type)
    action = as_key(action)

    def enforce(
        request: Request,
        subject: SubjectAttributes = Depends(get_subject),
        evaluator: PolicyEvaluator = Depends(get_policy_evaluator),
        settings: Settings = Depends(get_settings),
        db: Session = Depends(get_db),
    ) -> AuthorizedRequest:
        resource = None
        resource_attributes = None
        if load_resource is not None:
            resource = load_resource(request, db)
            if resource is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{resource_type} not found")
            try:
                resource_attributes = build_resource_attributes(resource)
            except InvalidResource as exc:
                logger.error("ABAC: cannot build attributes for %s: %s", resource_type, exc)
                raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Invalid resource") from exc

        context = build_context_attributes(
            {
                "request_ip": request.headers.get("X-Forwarded-For")
                or request.headers.get("X-Real-IP")
                or (request.client.host if request.client else None),
                "client_type": request.headers.get("User-Agent"),
            }
        )

        result = evaluator.evaluate(resource_type, action, subject, resource_attributes, context)
        if not result.granted:
            logger.info(
                "ABAC: denied subject=%s resource_type=%s action=%s reason=%s",
                subject.id,
                resource_type,
                action,
                result.reason,
            )
            detail: dict[str, Any] = {"error": "Access denied", "resource_type": resource_type, "action": action}
            if settings.expose_denial_reasons:
                detail["reason"] = result.reason
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)

        access = AuthorizedRequest(subject=subject, result=result, resource=resource)
        request.state.access = access
        return access

    return enforce


def require_roles(*roles: str) -> Callable[..., SubjectAttributes]:
    """Dependency granting access when the subject holds any of ``roles``."""

    wanted = frozenset(roles)

    def enforce(subject: SubjectAttributes = Depends(get_subject)) -> SubjectAttributes:
        if not wanted & set(subject.all_roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient role. Required one of: {sorted(wanted)}",
            )
        return subject

    return enforce
