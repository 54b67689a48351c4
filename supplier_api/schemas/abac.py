from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SubjectOut(BaseModel):
    id: str
    principal_type: str
    roles: list[str]
    organization_id: str | None = None
    employee_code: str | None = None
    org_unit_ids: list[str] = Field(default_factory=list)


class PolicyDocumentIn(BaseModel):
    """Whole policy configuration; replaces the current one."""

    policies: dict[str, dict[str, dict[str, Any]]]


class PolicyDocumentOut(BaseModel):
    policies: dict[str, dict[str, dict[str, Any]]]
    resource_types: list[str]
