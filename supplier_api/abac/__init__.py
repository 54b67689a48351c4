"""
Attribute-based access control for the supplier platform.

Build attribute bundles with the ``build_*_attributes`` helpers, then ask a
PolicyEvaluator whether (subject, resource, action, context) is permitted.
The policy tables are plain data; see ``defaults`` and ``loader``.
"""

from .attributes import Action, ContextAttributes, PrincipalType, ResourceAttributes, ResourceType, SubjectAttributes
from .defaults import default_policy_config
from .evaluator import AccessControlResult, PolicyEvaluator
from .extraction import (
    InvalidResource,
    SubjectResolutionError,
    build_context_attributes,
    build_resource_attributes,
    build_subject_attributes,
)
from .loader import PolicyConfigError, load_policy_config, policy_config_from_dict, policy_config_to_dict
from .permissions import ALLOW, DENY, Always, Predicate, Rule
from .policy import PolicyConfiguration, ResourcePolicy

__all__ = [
    "ALLOW",
    "DENY",
    "AccessControlResult",
    "Action",
    "Always",
    "ContextAttributes",
    "InvalidResource",
    "PolicyConfigError",
    "PolicyConfiguration",
    "PolicyEvaluator",
    "Predicate",
    "PrincipalType",
    "ResourceAttributes",
    "ResourcePolicy",
    "ResourceType",
    "Rule",
    "SubjectAttributes",
    "SubjectResolutionError",
    "build_context_attributes",
    "build_resource_attributes",
    "build_subject_attributes",
    "default_policy_config",
    "load_policy_config",
    "policy_config_from_dict",
    "policy_config_to_dict",
]
