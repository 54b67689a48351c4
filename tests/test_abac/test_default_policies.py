"""Behaviour of the built-in policy set."""

from __future__ import annotations

import pytest

from supplier_api.abac import PolicyEvaluator, ResourceAttributes, SubjectAttributes, default_policy_config
from supplier_api.abac.defaults import SUPPLIER_POLICY
from supplier_api.abac.permissions import DENY


@pytest.fixture
def evaluator() -> PolicyEvaluator:
    return PolicyEvaluator(default_policy_config())


def employee(id="u1", org="org-a", roles=()):
    return SubjectAttributes(id=id, principal_type="EMPLOYEE", roles=roles, organization_id=org)


def test_default_config_covers_core_resource_types():
    assert set(default_policy_config().resource_types) == {
        "supplier",
        "supplier_site",
        "approval_request",
        "document",
        "organization",
    }


def test_resource_types_without_policy_are_denied(evaluator):
    admin = SubjectAttributes(id="a1", principal_type="ADMIN")
    assert evaluator.evaluate("employee", "view", admin).granted is False
    assert evaluator.evaluate("supplier_term", "view", admin).granted is False


def test_supplier_delete_example(evaluator):
    resource = ResourceAttributes(id="sup1", owner_id="s1", status="DRAFT")
    supplier = SubjectAttributes(id="s1", principal_type="SUPPLIER", roles=("SUPPLIER",))
    admin = SubjectAttributes(id="a1", principal_type="ADMIN", roles=("ADMIN",))

    assert SUPPLIER_POLICY.permission_for("SUPPLIER", "delete") == DENY
    assert evaluator.evaluate("supplier", "delete", supplier, resource).granted is False
    assert evaluator.evaluate("supplier", "delete", admin, resource).granted is True


@pytest.mark.parametrize("resource_type", ["supplier", "supplier_site", "approval_request", "document", "organization"])
def test_admin_may_view_anything_without_resource(evaluator, resource_type):
    admin = SubjectAttributes(id="a1", principal_type="ADMIN")
    assert evaluator.evaluate(resource_type, "view", admin).granted is True


def test_employee_views_suppliers_of_own_organization_only(evaluator):
    resource = ResourceAttributes(id="sup1", organization_id="org-a")
    assert evaluator.evaluate("supplier", "view", employee(org="org-a"), resource).granted is True
    assert evaluator.evaluate("supplier", "view", employee(org="org-b"), resource).granted is False


def test_employee_updates_own_draft_supplier_only(evaluator):
    draft = ResourceAttributes(id="sup1", owner_id="u1", status="DRAFT")
    pending = ResourceAttributes(id="sup1", owner_id="u1", status="PENDING_APPROVAL")
    assert evaluator.evaluate("supplier", "update", employee(id="u1"), draft).granted is True
    assert evaluator.evaluate("supplier", "update", employee(id="u1"), pending).granted is False
    assert evaluator.evaluate("supplier", "update", employee(id="u2"), draft).granted is False


def test_supplier_manager_approves_pending_suppliers_of_own_organization(evaluator):
    manager = employee(roles=("SUPPLIER_MANAGER",))
    pending = ResourceAttributes(id="sup1", organization_id="org-a", status="PENDING_APPROVAL")
    active = ResourceAttributes(id="sup1", organization_id="org-a", status="ACTIVE")
    foreign = ResourceAttributes(id="sup1", organization_id="org-b", status="PENDING_APPROVAL")

    assert evaluator.evaluate("supplier", "approve", manager, pending).granted is True
    assert evaluator.evaluate("supplier", "approve", manager, active).granted is False
    assert evaluator.evaluate("supplier", "approve", manager, foreign).granted is False
    assert evaluator.evaluate("supplier", "approve", employee(), pending).granted is False


def test_supplier_principal_updates_own_record_until_terminal(evaluator):
    me = SubjectAttributes(id="s1", principal_type="SUPPLIER")
    assert evaluator.evaluate("supplier", "view", me, ResourceAttributes(id="s1")).granted is True
    assert evaluator.evaluate("supplier", "view", me, ResourceAttributes(id="s2")).granted is False
    assert evaluator.evaluate("supplier", "update", me, ResourceAttributes(id="s1", status="ACTIVE")).granted is True
    for terminal in ("INACTIVE", "REJECTED"):
        record = ResourceAttributes(id="s1", status=terminal)
        assert evaluator.evaluate("supplier", "update", me, record).granted is False


def test_supplier_sees_own_sites(evaluator):
    me = SubjectAttributes(id="s1", principal_type="SUPPLIER")
    site = ResourceAttributes(id="site1", status="ACTIVE", extra={"supplier_id": "s1"})
    other = ResourceAttributes(id="site2", extra={"supplier_id": "s2"})
    assert evaluator.evaluate("supplier_site", "view", me, site).granted is True
    assert evaluator.evaluate("supplier_site", "create", me, site).granted is True
    assert evaluator.evaluate("supplier_site", "view", me, other).granted is False
    assert evaluator.evaluate("supplier_site", "delete", me, site).granted is False


def test_site_principal_manages_own_site(evaluator):
    site_user = SubjectAttributes(id="site1", principal_type="SUPPLIER_SITE")
    assert evaluator.evaluate("supplier_site", "update", site_user, ResourceAttributes(id="site1")).granted is True
    rejected = ResourceAttributes(id="site1", status="REJECTED")
    assert evaluator.evaluate("supplier_site", "update", site_user, rejected).granted is False


def test_approval_requests(evaluator):
    pending = ResourceAttributes(
        id="ar1", organization_id="org-a", status="PENDING", extra={"requested_by_id": "u1"}
    )
    approved = ResourceAttributes(
        id="ar1", organization_id="org-a", status="APPROVED", extra={"requested_by_id": "u1"}
    )
    approver = employee(id="u9", roles=("APPROVER",))

    assert evaluator.evaluate("approval_request", "view", employee(id="u1"), pending).granted is True
    assert evaluator.evaluate("approval_request", "view", employee(id="u2"), pending).granted is False
    assert evaluator.evaluate("approval_request", "update", employee(id="u1"), approved).granted is False
    assert evaluator.evaluate("approval_request", "approve", approver, pending).granted is True
    assert evaluator.evaluate("approval_request", "approve", approver, approved).granted is False
    assert evaluator.evaluate("approval_request", "approve", employee(id="u1"), pending).granted is False


def test_documents(evaluator):
    doc = ResourceAttributes(id="d1", organization_id="org-a", owner_id="u1", extra={"supplier_id": "s1"})
    verifier = employee(id="v1", roles=("DOCUMENT_VERIFIER",))
    supplier = SubjectAttributes(id="s1", principal_type="SUPPLIER")

    assert evaluator.evaluate("document", "verify", verifier, doc).granted is True
    assert evaluator.evaluate("document", "verify", employee(id="u1"), doc).granted is False
    assert evaluator.evaluate("document", "delete", employee(id="u1"), doc).granted is True
    assert evaluator.evaluate("document", "delete", employee(id="u2"), doc).granted is False
    assert evaluator.evaluate("document", "update", supplier, doc).granted is True


def test_organizations(evaluator):
    org = ResourceAttributes(id="org-a")
    assert evaluator.evaluate("organization", "view", employee(org="org-a"), org).granted is True
    assert evaluator.evaluate("organization", "view", employee(org="org-b"), org).granted is False
    assert evaluator.evaluate("organization", "update", employee(org="org-a"), org).granted is False
    org_admin = employee(org="org-a", roles=("ORGANIZATION_ADMIN",))
    assert evaluator.evaluate("organization", "update", org_admin, org).granted is True
