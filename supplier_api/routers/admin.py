from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from supplier_api.abac import (
    PolicyConfigError,
    PolicyEvaluator,
    SubjectAttributes,
    policy_config_from_dict,
    policy_config_to_dict,
)
from supplier_api.schemas.abac import PolicyDocumentIn, PolicyDocumentOut, SubjectOut
from supplier_api.security.dependencies import get_policy_evaluator, get_subject, require_roles

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"])


@router.get("/me", response_model=SubjectOut)
def me(subject: SubjectAttributes = Depends(get_subject)) -> SubjectOut:
    return SubjectOut(
        id=subject.id,
        principal_type=subject.principal_type,
        roles=list(subject.all_roles),
        organization_id=subject.organization_id,
        employee_code=subject.employee_code,
        org_unit_ids=sorted(subject.org_unit_ids),
    )


def _document_out(evaluator: PolicyEvaluator) -> PolicyDocumentOut:
    config = evaluator.get_policy_config()
    return PolicyDocumentOut(resource_types=list(config.resource_types), **policy_config_to_dict(config))


@router.get("/admin/abac/policies", response_model=PolicyDocumentOut, dependencies=[Depends(require_roles("ADMIN"))])
def get_policies(evaluator: PolicyEvaluator = Depends(get_policy_evaluator)) -> PolicyDocumentOut:
    return _document_out(evaluator)


@router.put("/admin/abac/policies", response_model=PolicyDocumentOut)
def replace_policies(
    body: PolicyDocumentIn,
    subject: SubjectAttributes = Depends(require_roles("ADMIN")),
    evaluator: PolicyEvaluator = Depends(get_policy_evaluator),
) -> PolicyDocumentOut:
    try:
        config = policy_config_from_dict(body.model_dump())
    except PolicyConfigError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    evaluator.update_policy_config(config)
    logger.info("ABAC policies replaced by subject=%s", subject.id)
    return _document_out(evaluator)
