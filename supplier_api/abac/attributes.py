"""
Attribute bundles consumed by the policy evaluator.

Three independent, immutable snapshots describe one authorization check:

- SubjectAttributes: who is calling (principal id, type, roles, tenant).
- ResourceAttributes: what is being acted upon (id, tenant, owner, status).
- ContextAttributes: the environment of the call (time, client details).

They are built per request by the helpers in ``supplier_api.abac.extraction``
and are never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class Action(str, Enum):
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"
    REJECT = "reject"
    ASSIGN = "assign"
    TRANSFER = "transfer"
    VERIFY = "verify"


class ResourceType(str, Enum):
    SUPPLIER = "supplier"
    SUPPLIER_SITE = "supplier_site"
    SUPPLIER_TERM = "supplier_term"
    APPROVAL_REQUEST = "approval_request"
    DOCUMENT = "document"
    ORGANIZATION = "organization"
    EMPLOYEE = "employee"
    ROLE = "role"
    ORG_UNIT = "org_unit"


class PrincipalType(str, Enum):
    EMPLOYEE = "EMPLOYEE"
    SUPPLIER = "SUPPLIER"
    SUPPLIER_SITE = "SUPPLIER_SITE"
    ADMIN = "ADMIN"


def as_key(value: str | Enum) -> str:
    """Normalize an enum member or plain string to the string used as a table key."""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _frozen(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class SubjectAttributes:
    """The authenticated principal making a request."""

    id: str
    principal_type: str
    roles: tuple[str, ...] = ()
    organization_id: str | None = None
    employee_code: str | None = None
    org_unit_ids: frozenset[str] = frozenset()
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "principal_type", as_key(self.principal_type))
        object.__setattr__(self, "roles", tuple(dict.fromkeys(as_key(r) for r in self.roles)))
        object.__setattr__(self, "org_unit_ids", frozenset(self.org_unit_ids))
        object.__setattr__(self, "extra", _frozen(self.extra))

    @property
    def all_roles(self) -> tuple[str, ...]:
        """Roles in evaluation order; the principal type is always an implicit role."""
        if not self.principal_type or self.principal_type in self.roles:
            return self.roles
        return (*self.roles, self.principal_type)


@dataclass(frozen=True)
class ResourceAttributes:
    """Read-only snapshot of the resource an action targets."""

    id: str
    organization_id: str | None = None
    owner_id: str | None = None
    status: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra", _frozen(self.extra))

    def get(self, name: str, default: Any = None) -> Any:
        """Look up a core field first, then the resource-type specific extras."""
        if name != "extra" and name in self.__dataclass_fields__:
            value = getattr(self, name)
            return default if value is None else value
        return self.extra.get(name, default)


@dataclass(frozen=True)
class ContextAttributes:
    """Environment of the call."""

    time_of_day: datetime
    request_ip: str | None = None
    client_type: str | None = None
    organization_id: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra", _frozen(self.extra))
