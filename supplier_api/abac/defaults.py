"""
Built-in policy set for the supplier management platform.

These tables are data: adding a resource type means adding a ResourcePolicy
here (or in a YAML policy document), not new evaluator code.
"""

from __future__ import annotations

from .attributes import Action, ResourceType
from .permissions import (
    ALLOW,
    DENY,
    all_of,
    any_of,
    is_owner,
    same_organization,
    status_in,
    status_not_in,
    subject_is_resource,
    subject_matches,
    subject_organization_is_resource,
)
from .policy import PolicyConfiguration, ResourcePolicy

# Role codes used by the default tables.
ADMIN = "ADMIN"
SUPPLIER_MANAGER = "SUPPLIER_MANAGER"
EMPLOYEE = "EMPLOYEE"
SUPPLIER = "SUPPLIER"
SUPPLIER_SITE = "SUPPLIER_SITE"
APPROVER = "APPROVER"
DOCUMENT_VERIFIER = "DOCUMENT_VERIFIER"
ORGANIZATION_ADMIN = "ORGANIZATION_ADMIN"

TERMINAL_STATUSES = ("INACTIVE", "REJECTED")

V, C, U, D = Action.VIEW, Action.CREATE, Action.UPDATE, Action.DELETE
APPROVE, REJECT, VERIFY = Action.APPROVE, Action.REJECT, Action.VERIFY


def _org_and_status(*statuses: str):
    return all_of(same_organization(), status_in(*statuses))


SUPPLIER_POLICY = ResourcePolicy(
    resource_type=ResourceType.SUPPLIER,
    role_permissions={
        ADMIN: {V: ALLOW, C: ALLOW, U: ALLOW, D: ALLOW, APPROVE: ALLOW, REJECT: ALLOW, VERIFY: ALLOW},
        SUPPLIER_MANAGER: {
            V: ALLOW,
            C: ALLOW,
            U: same_organization(),
            D: _org_and_status("DRAFT"),
            APPROVE: _org_and_status("PENDING_APPROVAL"),
            REJECT: _org_and_status("PENDING_APPROVAL"),
            VERIFY: same_organization(),
        },
        EMPLOYEE: {
            V: same_organization(),
            C: ALLOW,
            U: all_of(is_owner(), status_in("DRAFT")),
            D: DENY,
            APPROVE: DENY,
            REJECT: DENY,
            VERIFY: DENY,
        },
        # A supplier principal's id is the id of its own supplier record.
        SUPPLIER: {
            V: subject_is_resource(),
            U: all_of(subject_is_resource(), status_not_in(*TERMINAL_STATUSES)),
            C: DENY,
            D: DENY,
            APPROVE: DENY,
            REJECT: DENY,
            VERIFY: DENY,
        },
    },
)

SUPPLIER_SITE_POLICY = ResourcePolicy(
    resource_type=ResourceType.SUPPLIER_SITE,
    role_permissions={
        ADMIN: {V: ALLOW, C: ALLOW, U: ALLOW, D: ALLOW, APPROVE: ALLOW, REJECT: ALLOW},
        SUPPLIER_MANAGER: {
            V: same_organization(),
            C: ALLOW,
            U: same_organization(),
            D: _org_and_status("DRAFT"),
            APPROVE: _org_and_status("PENDING_APPROVAL"),
            REJECT: _org_and_status("PENDING_APPROVAL"),
        },
        EMPLOYEE: {
            V: same_organization(),
            C: same_organization(),
            U: all_of(is_owner(), status_in("DRAFT")),
            D: DENY,
            APPROVE: DENY,
            REJECT: DENY,
        },
        SUPPLIER: {
            V: subject_matches("supplier_id"),
            U: all_of(subject_matches("supplier_id"), status_not_in(*TERMINAL_STATUSES)),
            C: subject_matches("supplier_id"),
            D: DENY,
            APPROVE: DENY,
            REJECT: DENY,
        },
        SUPPLIER_SITE: {
            V: subject_is_resource(),
            U: all_of(subject_is_resource(), status_not_in(*TERMINAL_STATUSES)),
            C: DENY,
            D: DENY,
            APPROVE: DENY,
            REJECT: DENY,
        },
    },
)

_requester = any_of(is_owner(), subject_matches("requested_by_id"))

APPROVAL_REQUEST_POLICY = ResourcePolicy(
    resource_type=ResourceType.APPROVAL_REQUEST,
    role_permissions={
        ADMIN: {V: ALLOW, C: ALLOW, U: ALLOW, D: ALLOW, APPROVE: ALLOW, REJECT: ALLOW},
        # TODO: restrict approve/reject to the approver assigned on the current step
        # once step assignments are part of the resource attributes.
        APPROVER: {
            V: same_organization(),
            APPROVE: _org_and_status("PENDING"),
            REJECT: _org_and_status("PENDING"),
            C: DENY,
            U: DENY,
            D: DENY,
        },
        EMPLOYEE: {
            V: _requester,
            C: ALLOW,
            U: all_of(_requester, status_in("PENDING")),
            D: DENY,
            APPROVE: DENY,
            REJECT: DENY,
        },
        SUPPLIER: {
            V: subject_matches("requested_by_id"),
            C: ALLOW,
            U: all_of(subject_matches("requested_by_id"), status_in("PENDING")),
            D: DENY,
            APPROVE: DENY,
            REJECT: DENY,
        },
    },
)

_supplier_document = any_of(is_owner(), subject_matches("supplier_id"))
_site_document = subject_matches("supplier_site_id")

DOCUMENT_POLICY = ResourcePolicy(
    resource_type=ResourceType.DOCUMENT,
    role_permissions={
        ADMIN: {V: ALLOW, C: ALLOW, U: ALLOW, D: ALLOW, VERIFY: ALLOW},
        DOCUMENT_VERIFIER: {
            V: same_organization(),
            VERIFY: same_organization(),
            C: DENY,
            U: DENY,
            D: DENY,
        },
        EMPLOYEE: {
            V: same_organization(),
            C: ALLOW,
            U: is_owner(),
            D: is_owner(),
            VERIFY: DENY,
        },
        SUPPLIER: {
            V: _supplier_document,
            C: ALLOW,
            U: _supplier_document,
            D: _supplier_document,
            VERIFY: DENY,
        },
        SUPPLIER_SITE: {
            V: _site_document,
            C: ALLOW,
            U: _site_document,
            D: _site_document,
            VERIFY: DENY,
        },
    },
)

ORGANIZATION_POLICY = ResourcePolicy(
    resource_type=ResourceType.ORGANIZATION,
    role_permissions={
        ADMIN: {V: ALLOW, C: ALLOW, U: ALLOW, D: ALLOW},
        ORGANIZATION_ADMIN: {
            V: subject_organization_is_resource(),
            U: subject_organization_is_resource(),
            C: DENY,
            D: DENY,
        },
        EMPLOYEE: {
            V: subject_organization_is_resource(),
            C: DENY,
            U: DENY,
            D: DENY,
        },
    },
)


def default_policy_config() -> PolicyConfiguration:
    return PolicyConfiguration.from_policies(
        [
            SUPPLIER_POLICY,
            SUPPLIER_SITE_POLICY,
            APPROVAL_REQUEST_POLICY,
            DOCUMENT_POLICY,
            ORGANIZATION_POLICY,
        ]
    )
