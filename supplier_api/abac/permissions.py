"""
Permission rules as data.

A permission is either:

- ``Always(granted)``: a constant that ignores its arguments, or
- ``Rule(predicate, ...)``: a tag naming one of the reusable predicates below
  plus the parameters it needs.

Keeping rules as tagged values (instead of stored closures) lets policy tables
be compared, serialized to YAML and tested in isolation. Each tag maps to a pure
function ``(rule, subject, resource, context) -> bool`` in ``PREDICATES``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Union

from .attributes import ContextAttributes, ResourceAttributes, SubjectAttributes


class Predicate(str, Enum):
    SAME_ORGANIZATION = "same_organization"
    IS_OWNER = "is_owner"
    STATUS_IN = "status_in"
    STATUS_NOT_IN = "status_not_in"
    SUBJECT_IS_RESOURCE = "subject_is_resource"
    SUBJECT_MATCHES_ATTRIBUTE = "subject_matches_attribute"
    SUBJECT_ORGANIZATION_IS_RESOURCE = "subject_organization_is_resource"
    ALL_OF = "all_of"
    ANY_OF = "any_of"


@dataclass(frozen=True)
class Always:
    """Static permission: granted or not, whatever the attributes."""

    granted: bool


@dataclass(frozen=True)
class Rule:
    """Predicate permission, evaluated against subject/resource/context."""

    predicate: Predicate
    statuses: frozenset[str] = frozenset()
    attribute: str | None = None
    rules: tuple[Rule, ...] = ()


Permission = Union[Always, Rule]

ALLOW = Always(True)
DENY = Always(False)


# ---- Constructors used by policy tables ----------------------------------------------


def same_organization() -> Rule:
    return Rule(Predicate.SAME_ORGANIZATION)


def is_owner() -> Rule:
    return Rule(Predicate.IS_OWNER)


def status_in(*statuses: str) -> Rule:
    return Rule(Predicate.STATUS_IN, statuses=frozenset(statuses))


def status_not_in(*statuses: str) -> Rule:
    return Rule(Predicate.STATUS_NOT_IN, statuses=frozenset(statuses))


def subject_is_resource() -> Rule:
    return Rule(Predicate.SUBJECT_IS_RESOURCE)


def subject_matches(attribute: str) -> Rule:
    """Subject id equals the named resource attribute (e.g. ``supplier_id``)."""
    return Rule(Predicate.SUBJECT_MATCHES_ATTRIBUTE, attribute=attribute)


def subject_organization_is_resource() -> Rule:
    return Rule(Predicate.SUBJECT_ORGANIZATION_IS_RESOURCE)


def all_of(*rules: Rule) -> Rule:
    return Rule(Predicate.ALL_OF, rules=tuple(rules))


def any_of(*rules: Rule) -> Rule:
    return Rule(Predicate.ANY_OF, rules=tuple(rules))


# ---- Predicate implementations -------------------------------------------------------


PredicateFn = Callable[
    [Rule, SubjectAttributes, "ResourceAttributes | None", "ContextAttributes | None"],
    bool,
]


def _same_organization(rule, subject, resource, context) -> bool:
    if not subject.organization_id or resource is None or not resource.organization_id:
        return False
    return subject.organization_id == resource.organization_id


def _is_owner(rule, subject, resource, context) -> bool:
    if not subject.id or resource is None or not resource.owner_id:
        return False
    return subject.id == resource.owner_id


def _status_in(rule, subject, resource, context) -> bool:
    if resource is None or not resource.status:
        return False
    return resource.status in rule.statuses


def _status_not_in(rule, subject, resource, context) -> bool:
    # A resource without a status is not in any terminal state.
    if resource is None:
        return False
    return (resource.status or "") not in rule.statuses


def _subject_is_resource(rule, subject, resource, context) -> bool:
    return resource is not None and bool(subject.id) and subject.id == resource.id


def _subject_matches_attribute(rule, subject, resource, context) -> bool:
    if resource is None or not rule.attribute or not subject.id:
        return False
    value = resource.get(rule.attribute)
    return value is not None and str(value) == subject.id


def _subject_organization_is_resource(rule, subject, resource, context) -> bool:
    if resource is None or not subject.organization_id:
        return False
    return subject.organization_id == resource.id


def _all_of(rule, subject, resource, context) -> bool:
    if not rule.rules:
        return False
    return all(evaluate_rule(r, subject, resource, context) for r in rule.rules)


def _any_of(rule, subject, resource, context) -> bool:
    return any(evaluate_rule(r, subject, resource, context) for r in rule.rules)


PREDICATES: dict[Predicate, PredicateFn] = {
    Predicate.SAME_ORGANIZATION: _same_organization,
    Predicate.IS_OWNER: _is_owner,
    Predicate.STATUS_IN: _status_in,
    Predicate.STATUS_NOT_IN: _status_not_in,
    Predicate.SUBJECT_IS_RESOURCE: _subject_is_resource,
    Predicate.SUBJECT_MATCHES_ATTRIBUTE: _subject_matches_attribute,
    Predicate.SUBJECT_ORGANIZATION_IS_RESOURCE: _subject_organization_is_resource,
    Predicate.ALL_OF: _all_of,
    Predicate.ANY_OF: _any_of,
}


def evaluate_rule(
    rule: Rule,
    subject: SubjectAttributes,
    resource: ResourceAttributes | None = None,
    context: ContextAttributes | None = None,
) -> bool:
    """
    Evaluate a predicate rule. Exceptions propagate; the evaluator decides
    how to treat them.
    """

    fn = PREDICATES[rule.predicate]
    return bool(fn(rule, subject, resource, context))
