"""
Policy documents: YAML (or any parsed mapping) <-> PolicyConfiguration.

Expected shape:

    policies:
      supplier:
        ADMIN:
          view: true
          delete: true
        EMPLOYEE:
          view: same_organization
          update:
            all_of:
              - is_owner
              - status_in: [DRAFT]
        SUPPLIER:
          update:
            all_of:
              - subject_is_resource
              - status_not_in: [INACTIVE, REJECTED]

A permission is a boolean, a bare predicate name, or a single-key mapping
``{predicate: argument}`` for predicates that take parameters.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from .attributes import Action
from .permissions import Always, Permission, Predicate, Rule
from .policy import PolicyConfiguration, ResourcePolicy


class PolicyConfigError(ValueError):
    """Raised when a policy document is invalid."""


PermissionSpec = Union[bool, str, dict[str, Any]]


class PolicyDocument(BaseModel):
    policies: dict[str, dict[str, dict[Action, PermissionSpec]]] = Field(default_factory=dict)


_BARE_PREDICATES = frozenset(
    {
        Predicate.SAME_ORGANIZATION,
        Predicate.IS_OWNER,
        Predicate.SUBJECT_IS_RESOURCE,
        Predicate.SUBJECT_ORGANIZATION_IS_RESOURCE,
    }
)
_STATUS_PREDICATES = frozenset({Predicate.STATUS_IN, Predicate.STATUS_NOT_IN})
_COMPOSITE_PREDICATES = frozenset({Predicate.ALL_OF, Predicate.ANY_OF})


def _predicate(name: Any, where: str) -> Predicate:
    try:
        return Predicate(str(name).strip())
    except ValueError as exc:
        raise PolicyConfigError(f"{where}: unknown predicate {name!r}") from exc


def parse_rule(raw: Any, where: str = "rule") -> Rule:
    if isinstance(raw, str):
        predicate = _predicate(raw, where)
        if predicate not in _BARE_PREDICATES:
            raise PolicyConfigError(f"{where}: predicate {predicate.value!r} requires an argument")
        return Rule(predicate)

    if not isinstance(raw, dict) or len(raw) != 1:
        raise PolicyConfigError(f"{where}: rule must be a predicate name or a single-key mapping")

    (name, arg), = raw.items()
    predicate = _predicate(name, where)

    if predicate in _BARE_PREDICATES:
        if arg not in (None, True):
            raise PolicyConfigError(f"{where}: predicate {predicate.value!r} takes no argument")
        return Rule(predicate)

    if predicate in _STATUS_PREDICATES:
        if isinstance(arg, str):
            arg = [arg]
        if not isinstance(arg, list) or not arg:
            raise PolicyConfigError(f"{where}: {predicate.value} needs a non-empty list of statuses")
        return Rule(predicate, statuses=frozenset(str(s) for s in arg))

    if predicate is Predicate.SUBJECT_MATCHES_ATTRIBUTE:
        if not isinstance(arg, str) or not arg.strip():
            raise PolicyConfigError(f"{where}: {predicate.value} needs an attribute name")
        return Rule(predicate, attribute=arg.strip())

    if not isinstance(arg, list) or not arg:
        raise PolicyConfigError(f"{where}: {predicate.value} needs a non-empty list of rules")
    return Rule(
        predicate,
        rules=tuple(parse_rule(item, f"{where}.{predicate.value}[{i}]") for i, item in enumerate(arg)),
    )


def parse_permission(raw: PermissionSpec, where: str = "permission") -> Permission:
    if isinstance(raw, bool):
        return Always(raw)
    return parse_rule(raw, where)


def policy_config_from_dict(raw: Any) -> PolicyConfiguration:
    """Validate a parsed policy document and build the configuration."""

    if not isinstance(raw, dict):
        raise PolicyConfigError("policy document must be a mapping")
    try:
        document = PolicyDocument.model_validate(raw)
    except ValidationError as exc:
        raise PolicyConfigError(f"invalid policy document: {exc}") from exc

    policies: list[ResourcePolicy] = []
    for resource_type, roles in document.policies.items():
        role_permissions: dict[str, dict[str, Permission]] = {}
        for role, actions in roles.items():
            role_permissions[role] = {
                action.value: parse_permission(spec, f"{resource_type}.{role}.{action.value}")
                for action, spec in actions.items()
            }
        policies.append(ResourcePolicy(resource_type=resource_type, role_permissions=role_permissions))

    return PolicyConfiguration.from_policies(policies)


def load_policy_config(path: Path) -> PolicyConfiguration:
    """Load a YAML policy document from disk."""

    raw_text = path.read_text(encoding="utf-8")
    raw = yaml.safe_load(raw_text) or {}
    if isinstance(raw, dict) and "policies" not in raw:
        raise PolicyConfigError(f"Missing top-level 'policies' key in policy document: {path}")
    return policy_config_from_dict(raw)


# ---- Serialization -------------------------------------------------------------------


def dump_rule(rule: Rule) -> Any:
    predicate = rule.predicate
    if predicate in _BARE_PREDICATES:
        return predicate.value
    if predicate in _STATUS_PREDICATES:
        return {predicate.value: sorted(rule.statuses)}
    if predicate is Predicate.SUBJECT_MATCHES_ATTRIBUTE:
        return {predicate.value: rule.attribute}
    return {predicate.value: [dump_rule(r) for r in rule.rules]}


def dump_permission(permission: Permission) -> Any:
    if isinstance(permission, Always):
        return permission.granted
    return dump_rule(permission)


def policy_config_to_dict(config: PolicyConfiguration) -> dict[str, Any]:
    return {
        "policies": {
            policy.resource_type: {
                role: {action: dump_permission(p) for action, p in actions.items()}
                for role, actions in policy.role_permissions.items()
            }
            for policy in config
        }
    }


def dump_policy_config(config: PolicyConfiguration) -> str:
    return yaml.safe_dump(policy_config_to_dict(config), sort_keys=False)
