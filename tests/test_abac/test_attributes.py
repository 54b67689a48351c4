from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
import uuid

import pytest

from supplier_api.abac import (
    ContextAttributes,
    InvalidResource,
    ResourceAttributes,
    SubjectAttributes,
    build_context_attributes,
    build_resource_attributes,
    build_subject_attributes,
)
from supplier_api.models.supplier import Document, SupplierStatus


# ---- Resource ------------------------------------------------------------------------


def test_resource_from_mapping():
    attrs = build_resource_attributes(
        {
            "id": "sup1",
            "organization_id": "org-a",
            "owner_id": "u1",
            "status": "DRAFT",
            "supplier_code": "SUP-1",
        }
    )

    assert attrs.id == "sup1"
    assert attrs.organization_id == "org-a"
    assert attrs.owner_id == "u1"
    assert attrs.status == "DRAFT"
    assert attrs.extra == {"supplier_code": "SUP-1"}


def test_resource_uid_and_owner_fallbacks():
    attrs = build_resource_attributes({"uid": "r1", "author_id": "u2", "created_by": "u3"})
    assert attrs.id == "r1"
    assert attrs.owner_id == "u2"

    attrs = build_resource_attributes({"id": "r1", "created_by": "u3"})
    assert attrs.owner_id == "u3"


def test_resource_without_id_is_invalid():
    with pytest.raises(InvalidResource):
        build_resource_attributes({"organization_id": "org-a"})
    with pytest.raises(InvalidResource):
        build_resource_attributes(None)
    with pytest.raises(InvalidResource):
        build_resource_attributes("sup1")


def test_resource_drops_nested_values_and_normalizes_ids():
    org_id = uuid.uuid4()
    attrs = build_resource_attributes(
        {
            "id": uuid.uuid4(),
            "organization_id": org_id,
            "status": SupplierStatus.ACTIVE,
            "tags": ["a", "b"],
            "address": {"city": "Pune"},
            "notes": None,
        }
    )

    assert attrs.organization_id == str(org_id)
    assert attrs.status == "ACTIVE"
    assert "tags" not in attrs.extra
    assert "address" not in attrs.extra
    assert "notes" not in attrs.extra


def test_resource_from_plain_object():
    record = SimpleNamespace(id=7, organization_id="org-a", owner_id="u1", _secret="x")
    attrs = build_resource_attributes(record)
    assert attrs.id == "7"
    assert attrs.owner_id == "u1"
    assert "_secret" not in attrs.extra


def test_resource_from_orm_instance_uses_mapped_columns():
    supplier_id = uuid.uuid4()
    doc = Document(
        id=uuid.uuid4(),
        organization_id=uuid.uuid4(),
        owner_id=uuid.uuid4(),
        supplier_id=supplier_id,
        document_type="PAN",
        file_path="docs/pan.pdf",
        status="PENDING",
    )

    attrs = build_resource_attributes(doc)

    assert attrs.id == str(doc.id)
    assert attrs.owner_id == str(doc.owner_id)
    assert attrs.status == "PENDING"
    assert attrs.get("supplier_id") == str(supplier_id)
    assert attrs.get("document_type") == "PAN"


def test_resource_attributes_are_read_only():
    attrs = ResourceAttributes(id="r1", extra={"a": 1})
    with pytest.raises(TypeError):
        attrs.extra["a"] = 2
    assert attrs.get("missing", "fallback") == "fallback"
    assert attrs.get("owner_id", "nobody") == "nobody"


# ---- Context -------------------------------------------------------------------------


def test_context_defaults_time_of_day():
    before = datetime.now(timezone.utc)
    context = build_context_attributes()
    assert isinstance(context, ContextAttributes)
    assert context.time_of_day >= before


def test_context_keeps_known_keys_and_moves_the_rest_to_extra():
    now = datetime(2024, 1, 1, 9, 30, tzinfo=timezone.utc)
    context = build_context_attributes(
        {"request_ip": "10.0.0.1", "client_type": "web", "tenant_hint": "acme"},
        now=now,
    )
    assert context.time_of_day == now
    assert context.request_ip == "10.0.0.1"
    assert context.client_type == "web"
    assert context.extra == {"tenant_hint": "acme"}


# ---- Subject -------------------------------------------------------------------------


def test_subject_roles_from_claims_and_principal_type():
    principal = SimpleNamespace(
        id=uuid.uuid4(),
        principal_type="SUPPLIER",
        extra_data={"roles": ["AUDITOR", "AUDITOR"], "region": "west", "nested": {"x": 1}},
    )

    subject = build_subject_attributes(None, principal, explicit_roles=["REVIEWER"])

    assert subject.id == str(principal.id)
    assert subject.roles == ("AUDITOR", "REVIEWER", "SUPPLIER")
    assert subject.organization_id is None
    assert subject.extra == {"region": "west"}


def test_subject_for_employee_without_db_uses_given_employee():
    principal = SimpleNamespace(id="u1", principal_type="EMPLOYEE", extra_data=None)
    employee = SimpleNamespace(organization_id=uuid.UUID(int=5), employee_code="E-9")

    subject = build_subject_attributes(None, principal, employee=employee)

    assert subject.roles == ("EMPLOYEE",)
    assert subject.organization_id == str(uuid.UUID(int=5))
    assert subject.employee_code == "E-9"
    assert subject.org_unit_ids == frozenset()


def test_subject_all_roles_appends_principal_type_once():
    subject = SubjectAttributes(id="u1", principal_type="EMPLOYEE", roles=("APPROVER", "APPROVER"))
    assert subject.roles == ("APPROVER",)
    assert subject.all_roles == ("APPROVER", "EMPLOYEE")

    subject = SubjectAttributes(id="u1", principal_type="EMPLOYEE", roles=("EMPLOYEE", "APPROVER"))
    assert subject.all_roles == ("EMPLOYEE", "APPROVER")
