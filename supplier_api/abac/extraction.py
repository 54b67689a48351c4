"""
Build attribute bundles from principal, employee and resource records.

``build_subject_attributes`` resolves an employee's organization, org units and
role assignments from the database. A failed lookup is logged and extraction
continues with the roles already known (fail-soft), unless ``fail_closed`` is
set, in which case SubjectResolutionError is raised.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
import logging
from typing import Any
from uuid import UUID

from sqlalchemy import inspect as sa_inspect, select
from sqlalchemy.exc import NoInspectionAvailable, SQLAlchemyError
from sqlalchemy.orm import Session

from supplier_api.models.identity import Employee, EmployeeOrgUnitRole, Role

from .attributes import ContextAttributes, PrincipalType, ResourceAttributes, SubjectAttributes, as_key

logger = logging.getLogger(__name__)

_SCALAR_TYPES = (str, int, float, bool, Decimal, UUID, date, datetime, Enum)

_ID_KEYS = ("id", "uid")
_OWNER_KEYS = ("owner_id", "author_id", "created_by")
_CORE_KEYS = frozenset({"id", "uid", "organization_id", "owner_id", "status"})

# Lookup failures on the enrichment path; anything else is a bug and propagates.
_ENRICHMENT_ERRORS = (SQLAlchemyError, AttributeError, LookupError)


class InvalidResource(ValueError):
    """Raised when a record cannot be turned into ResourceAttributes."""


class SubjectResolutionError(RuntimeError):
    """Raised in fail-closed mode when employee roles cannot be resolved."""


def _normalize(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value


def _as_id(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(_normalize(value))


def _first_id(items: Mapping[str, Any], keys: Iterable[str]) -> str | None:
    for key in keys:
        value = _as_id(items.get(key))
        if value is not None:
            return value
    return None


def _record_items(raw: Any) -> dict[str, Any]:
    """Flat view of a mapping, an ORM instance (mapped columns only) or a plain object."""
    if isinstance(raw, Mapping):
        return dict(raw)
    try:
        state = sa_inspect(raw)
    except NoInspectionAvailable:
        if not hasattr(raw, "__dict__"):
            raise InvalidResource(f"Resource must be an object, got {type(raw).__name__}") from None
        return {k: v for k, v in vars(raw).items() if not k.startswith("_")}
    return {attr.key: getattr(raw, attr.key) for attr in state.mapper.column_attrs}


# ---- Resource ------------------------------------------------------------------------


def build_resource_attributes(raw: Any) -> ResourceAttributes:
    """
    Snapshot a resource record (mapping, ORM instance or plain object).

    Raises InvalidResource when the record has no ``id`` (or ``uid``).
    """

    if raw is None or isinstance(raw, _SCALAR_TYPES):
        raise InvalidResource("Resource must be an object")

    items = _record_items(raw)
    resource_id = _first_id(items, _ID_KEYS)
    if resource_id is None:
        raise InvalidResource("Resource must have an id")

    owner_id = _first_id(items, _OWNER_KEYS)
    status = items.get("status")

    extra: dict[str, Any] = {}
    for key, value in items.items():
        if key in _CORE_KEYS or value is None:
            continue
        # Nested objects stay out to keep the bundle flat.
        if isinstance(value, _SCALAR_TYPES):
            extra[key] = _normalize(value)

    return ResourceAttributes(
        id=resource_id,
        organization_id=_as_id(items.get("organization_id")),
        owner_id=owner_id,
        status=str(_normalize(status)) if status is not None else None,
        extra=extra,
    )


# ---- Context -------------------------------------------------------------------------


def build_context_attributes(
    partial: Mapping[str, Any] | None = None,
    *,
    now: datetime | None = None,
) -> ContextAttributes:
    values: dict[str, Any] = {"time_of_day": now or datetime.now(timezone.utc)}
    extra: dict[str, Any] = {}
    for key, value in (partial or {}).items():
        if key in ContextAttributes.__dataclass_fields__ and key != "extra":
            values[key] = value
        elif key == "extra" and isinstance(value, Mapping):
            extra.update(value)
        else:
            extra[key] = value
    if values.get("time_of_day") is None:
        values["time_of_day"] = now or datetime.now(timezone.utc)
    return ContextAttributes(extra=extra, **values)


# ---- Subject -------------------------------------------------------------------------


def _roles_from_extra(extra_data: Any) -> list[str]:
    if not isinstance(extra_data, Mapping):
        return []
    roles = extra_data.get("roles")
    if isinstance(roles, (list, tuple)):
        return [str(r) for r in roles]
    return []


def _scalar_extra(extra_data: Any) -> dict[str, Any]:
    if not isinstance(extra_data, Mapping):
        return {}
    return {k: _normalize(v) for k, v in extra_data.items() if isinstance(v, _SCALAR_TYPES)}


def _load_employee_roles(db: Session, principal_id: Any) -> tuple[list[str], list[str]]:
    """Return (role names and codes, org unit ids) of active role assignments."""
    rows = db.execute(
        select(EmployeeOrgUnitRole, Role)
        .join(Role, EmployeeOrgUnitRole.role_id == Role.id)
        .where(EmployeeOrgUnitRole.employee_user_id == principal_id)
        .order_by(Role.name)
    ).all()

    names = [role.name for _assignment, role in rows]
    codes = [role.role_code for _assignment, role in rows if role.role_code]
    org_units = [str(assignment.org_unit_id) for assignment, _role in rows]
    return names + codes, org_units


def build_subject_attributes(
    db: Session | None,
    principal: Any,
    employee: Any | None = None,
    explicit_roles: Iterable[str] | None = None,
    *,
    fail_closed: bool = False,
) -> SubjectAttributes:
    """
    Build SubjectAttributes for a principal (an ``AppUser`` or similar object
    exposing ``id``, ``principal_type`` and ``extra_data``).

    Roles: roles in ``extra_data["roles"]`` + ``explicit_roles`` + the principal
    type itself, then, for employees, the names and codes of their role
    assignments. Duplicates are dropped, first occurrence wins.
    """

    # Read the principal once; nothing below touches it again.
    principal_key = principal.id
    principal_id = str(principal_key)
    principal_type = as_key(principal.principal_type)
    extra_data = getattr(principal, "extra_data", None)

    roles: list[str] = _roles_from_extra(extra_data)
    if explicit_roles:
        roles.extend(str(r) for r in explicit_roles)
    roles.append(principal_type)

    organization_id: str | None = None
    employee_code: str | None = None
    org_unit_ids: list[str] = []

    if principal_type == PrincipalType.EMPLOYEE.value:
        try:
            if employee is None and db is not None:
                employee = db.scalars(select(Employee).where(Employee.user_id == principal_key)).first()

            if employee is not None:
                employee_code = employee.employee_code
                organization_id = _as_id(employee.organization_id)
                if db is not None:
                    assigned_roles, org_unit_ids = _load_employee_roles(db, principal_key)
                    roles.extend(assigned_roles)
        except _ENRICHMENT_ERRORS as exc:
            if fail_closed:
                raise SubjectResolutionError(f"could not resolve roles for principal {principal_id}") from exc
            logger.warning(
                "ABAC: employee attribute lookup failed; continuing with partial roles principal=%s",
                principal_id,
                exc_info=True,
            )

    return SubjectAttributes(
        id=principal_id,
        principal_type=principal_type,
        roles=tuple(roles),
        organization_id=organization_id,
        employee_code=employee_code,
        org_unit_ids=frozenset(org_unit_ids),
        extra=_scalar_extra(extra_data),
    )
