"""
ABAC policy evaluator.

The single decision point for authorization checks. Given a resource type,
an action and the subject/resource/context attribute bundles, it looks up the
applicable policy and answers permit or deny with a reason.

Decision algorithm:
1. No roles on the subject -> deny.
2. No policy for the resource type -> deny.
3. For each of the subject's roles (principal type included):
   - no entry for the role or the action -> not applicable, next role;
   - Always(True) -> grant;
   - Always(False) -> next role (another role may still grant);
   - Rule -> evaluate the predicate; true grants, false or an exception
     moves on to the next role.
4. No role granted -> deny.

Permissions are therefore the union across all of a subject's roles. The
evaluator never raises and performs no I/O; it reads the configuration
reference once per call, so a concurrent ``update_policy_config`` is seen
either entirely or not at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging

from .attributes import ContextAttributes, ResourceAttributes, SubjectAttributes, as_key
from .defaults import default_policy_config
from .permissions import Always, Rule, evaluate_rule
from .policy import PolicyConfiguration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessControlResult:
    """Outcome of one authorization check."""

    granted: bool
    reason: str | None = None
    resource_type: str | None = None
    action: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "granted": self.granted,
            "reason": self.reason,
            "resource_type": self.resource_type,
            "action": self.action,
        }


class PolicyEvaluator:
    """
    Evaluates access requests against an injected PolicyConfiguration.

    Usage:
        evaluator = PolicyEvaluator(default_policy_config())
        result = evaluator.evaluate("supplier", "view", subject, resource)
        if not result.granted:
            ...
    """

    def __init__(self, config: PolicyConfiguration | None = None) -> None:
        self._config = config if config is not None else default_policy_config()

    def get_policy_config(self) -> PolicyConfiguration:
        return self._config

    def update_policy_config(self, config: PolicyConfiguration) -> None:
        """Replace the whole configuration. Callers wanting one change must resubmit everything."""
        if not isinstance(config, PolicyConfiguration):
            raise TypeError(f"expected PolicyConfiguration, got {type(config).__name__}")
        self._config = config
        logger.info("ABAC policy configuration replaced resource_types=%s", list(config.resource_types))

    def evaluate(
        self,
        resource_type: str | Enum,
        action: str | Enum,
        subject: SubjectAttributes,
        resource: ResourceAttributes | None = None,
        context: ContextAttributes | None = None,
    ) -> AccessControlResult:
        config = self._config
        resource_type = as_key(resource_type)
        action = as_key(action)

        def decide(granted: bool, reason: str) -> AccessControlResult:
            return AccessControlResult(granted=granted, reason=reason, resource_type=resource_type, action=action)

        roles = subject.all_roles if subject is not None else ()
        if not roles:
            return decide(False, "Subject has no roles assigned")

        policy = config.get(resource_type)
        if policy is None:
            logger.debug("ABAC: no policy resource_type=%s action=%s", resource_type, action)
            return decide(False, f"No policy defined for resource type: {resource_type}")

        for role in roles:
            permission = policy.permission_for(role, action)
            if permission is None:
                continue

            if isinstance(permission, Always):
                if permission.granted:
                    logger.debug("ABAC: allowed role=%s resource_type=%s action=%s", role, resource_type, action)
                    return decide(True, f'Role "{role}" has unconditional permission for {action} on {resource_type}')
                continue

            if isinstance(permission, Rule) and self._rule_allows(role, permission, subject, resource, context):
                logger.debug(
                    "ABAC: allowed role=%s resource_type=%s action=%s rule=%s",
                    role,
                    resource_type,
                    action,
                    permission.predicate.value,
                )
                return decide(True, f'Role "{role}" has conditional permission for {action} on {resource_type}')

        logger.debug(
            "ABAC: denied subject=%s roles=%s resource_type=%s action=%s",
            subject.id,
            list(roles),
            resource_type,
            action,
        )
        return decide(
            False,
            f"None of the subject's roles ({', '.join(roles)}) grant {action} permission on {resource_type}",
        )

    @staticmethod
    def _rule_allows(
        role: str,
        rule: Rule,
        subject: SubjectAttributes,
        resource: ResourceAttributes | None,
        context: ContextAttributes | None,
    ) -> bool:
        try:
            return evaluate_rule(rule, subject, resource, context)
        except Exception:
            # A failing predicate denies for this role only.
            logger.warning(
                "ABAC: error evaluating %s for role=%s subject=%s",
                rule.predicate.value,
                role,
                subject.id,
                exc_info=True,
            )
            return False
