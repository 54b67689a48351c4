from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from .attributes import as_key
from .permissions import Always, Permission, Rule

RolePermissions = Mapping[str, Permission]


@dataclass(frozen=True)
class ResourcePolicy:
    """Role -> action -> permission table for one resource type."""

    resource_type: str
    role_permissions: Mapping[str, RolePermissions]

    def __post_init__(self) -> None:
        frozen: dict[str, RolePermissions] = {}
        for role, actions in self.role_permissions.items():
            entries: dict[str, Permission] = {}
            for action, permission in actions.items():
                if isinstance(permission, bool):
                    permission = Always(permission)
                if not isinstance(permission, (Always, Rule)):
                    raise TypeError(
                        f"permission for {self.resource_type}.{role}.{as_key(action)} "
                        f"must be Always or Rule, got {type(permission).__name__}"
                    )
                entries[as_key(action)] = permission
            frozen[as_key(role)] = MappingProxyType(entries)
        object.__setattr__(self, "resource_type", as_key(self.resource_type))
        object.__setattr__(self, "role_permissions", MappingProxyType(frozen))

    @property
    def roles(self) -> tuple[str, ...]:
        return tuple(self.role_permissions.keys())

    def permission_for(self, role: str, action: str | Enum) -> Permission | None:
        """Return the permission a role holds for an action, or None when not configured."""
        actions = self.role_permissions.get(role)
        if actions is None:
            return None
        return actions.get(as_key(action))


@dataclass(frozen=True)
class PolicyConfiguration:
    """
    Complete policy table: resource type -> ResourcePolicy.

    Instances are read-only. To change a rule build a new configuration (see
    ``with_policy`` / ``without``) and hand it to
    ``PolicyEvaluator.update_policy_config``.
    """

    policies: Mapping[str, ResourcePolicy]

    def __post_init__(self) -> None:
        frozen: dict[str, ResourcePolicy] = {}
        for key, policy in self.policies.items():
            if not isinstance(policy, ResourcePolicy):
                raise TypeError(f"policy for {as_key(key)!r} must be a ResourcePolicy")
            if as_key(key) != policy.resource_type:
                raise ValueError(
                    f"policy keyed {as_key(key)!r} declares resource type {policy.resource_type!r}"
                )
            frozen[policy.resource_type] = policy
        object.__setattr__(self, "policies", MappingProxyType(frozen))

    @classmethod
    def from_policies(cls, policies: Iterable[ResourcePolicy]) -> PolicyConfiguration:
        return cls({p.resource_type: p for p in policies})

    @property
    def resource_types(self) -> tuple[str, ...]:
        return tuple(self.policies.keys())

    def get(self, resource_type: str | Enum) -> ResourcePolicy | None:
        return self.policies.get(as_key(resource_type))

    def with_policy(self, policy: ResourcePolicy) -> PolicyConfiguration:
        """Copy of this configuration with ``policy`` added or replaced."""
        updated = dict(self.policies)
        updated[policy.resource_type] = policy
        return PolicyConfiguration(updated)

    def without(self, resource_type: str | Enum) -> PolicyConfiguration:
        updated = dict(self.policies)
        updated.pop(as_key(resource_type), None)
        return PolicyConfiguration(updated)

    def __contains__(self, resource_type: object) -> bool:
        if not isinstance(resource_type, (str, Enum)):
            return False
        return as_key(resource_type) in self.policies

    def __iter__(self) -> Iterator[ResourcePolicy]:
        return iter(self.policies.values())

    def __len__(self) -> int:
        return len(self.policies)
