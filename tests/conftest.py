"""
Pytest fixtures for the test suite.

Data-layer tests use an in-memory SQLite engine and a session that rolls back
after each test, so tests do not affect each other.
"""
from __future__ import annotations

from dataclasses import dataclass

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from supplier_api.db import filters as _filters  # noqa: F401  (register soft-delete filter)
from supplier_api.models.identity import AppUser, Employee, EmployeeOrgUnitRole, Organization, OrgUnit, Role
from supplier_api.models.supplier import ApprovalRequest, Document, Supplier


TEST_DB_URL = "sqlite:///:memory:"


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    from supplier_api.db.base import Base
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """
    Provide a Session bound to the test DB; roll back after each test.

    The transaction is rolled back so the next test gets a clean state.
    """
    connection = tables.connect()
    transaction = connection.begin()
    TestSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
    )
    session = TestSession()
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@dataclass
class World:
    """A small two-tenant data set."""

    acme: Organization
    globex: Organization
    procurement: OrgUnit
    manager_role: Role
    approver_role: Role
    admin: AppUser
    manager: AppUser
    clerk: AppUser
    outsider: AppUser
    supplier_user: AppUser
    supplier: Supplier
    approval: ApprovalRequest
    document: Document


@pytest.fixture
def world(db_session) -> World:
    """
    Seed organizations, principals, role assignments and supplier-side records.

    - manager: EMPLOYEE of Acme holding SUPPLIER_MANAGER and APPROVER via role assignments
    - clerk: plain EMPLOYEE of Acme
    - outsider: EMPLOYEE of Globex
    - supplier_user: SUPPLIER principal owning the Acme supplier record
    """
    acme = Organization(name="Acme")
    globex = Organization(name="Globex")
    db_session.add_all([acme, globex])
    db_session.flush()

    procurement = OrgUnit(organization_id=acme.id, name="Procurement", org_unit_code="PROC")
    manager_role = Role(organization_id=acme.id, name="Supplier Manager", role_code="SUPPLIER_MANAGER")
    approver_role = Role(organization_id=acme.id, name="Approver", role_code="APPROVER")
    db_session.add_all([procurement, manager_role, approver_role])
    db_session.flush()

    admin = AppUser(user_name="admin", user_type="ADMIN")
    manager = AppUser(user_name="manager", user_type="EMPLOYEE")
    clerk = AppUser(user_name="clerk", user_type="EMPLOYEE")
    outsider = AppUser(user_name="outsider", user_type="EMPLOYEE")
    supplier_user = AppUser(user_name="supplier", user_type="SUPPLIER")
    db_session.add_all([admin, manager, clerk, outsider, supplier_user])
    db_session.flush()

    db_session.add_all(
        [
            Employee(
                user_id=manager.id,
                organization_id=acme.id,
                employee_code="E-1",
                first_name="Mona",
                last_name="Manager",
                email="mona@acme.example.com",
            ),
            Employee(
                user_id=clerk.id,
                organization_id=acme.id,
                employee_code="E-2",
                first_name="Ed",
                last_name="Clerk",
                email="ed@acme.example.com",
            ),
            Employee(
                user_id=outsider.id,
                organization_id=globex.id,
                employee_code="G-1",
                first_name="Olga",
                last_name="Outsider",
                email="olga@globex.example.com",
            ),
        ]
    )
    db_session.flush()

    db_session.add_all(
        [
            EmployeeOrgUnitRole(employee_user_id=manager.id, org_unit_id=procurement.id, role_id=manager_role.id),
            EmployeeOrgUnitRole(employee_user_id=manager.id, org_unit_id=procurement.id, role_id=approver_role.id),
        ]
    )

    supplier = Supplier(
        id=supplier_user.id,
        organization_id=acme.id,
        supplier_code="SUP-1",
        name="Sam's Supplies",
        contact_email="sam@supplies.example.com",
        status="PENDING_APPROVAL",
        created_by=clerk.id,
    )
    db_session.add(supplier)
    db_session.flush()

    approval = ApprovalRequest(
        organization_id=acme.id,
        supplier_id=supplier.id,
        requested_by_id=clerk.id,
        status="PENDING",
        created_by=clerk.id,
    )
    document = Document(
        organization_id=acme.id,
        owner_id=supplier_user.id,
        supplier_id=supplier.id,
        document_type="GST_CERTIFICATE",
        file_path="docs/gst.pdf",
    )
    db_session.add_all([approval, document])
    db_session.commit()

    return World(
        acme=acme,
        globex=globex,
        procurement=procurement,
        manager_role=manager_role,
        approver_role=approver_role,
        admin=admin,
        manager=manager,
        clerk=clerk,
        outsider=outsider,
        supplier_user=supplier_user,
        supplier=supplier,
        approval=approval,
        document=document,
    )
