from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from supplier_api.abac.attributes import PrincipalType
from supplier_api.db.base import Base
from supplier_api.db.session import SessionLocal, engine
from supplier_api.models.identity import AppUser, Employee, EmployeeOrgUnitRole, Organization, OrgUnit, Role
from supplier_api.models.supplier import ApprovalRequest, ApprovalStatus, Document, Supplier, SupplierStatus

# Fixed ids so the demo bearer tokens are predictable.
ADMIN_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
MANAGER_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
EMPLOYEE_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000003")
SUPPLIER_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000004")


def init_db() -> None:
    """Create tables and seed demo data once."""

    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        if _has_seed_data(db):
            return
        seed(db)


def _has_seed_data(db: Session) -> bool:
    stmt = select(Organization.id).limit(1).execution_options(include_deleted=True)
    return db.execute(stmt).first() is not None


def seed(db: Session) -> None:
    acme = Organization(name="Acme Retail")
    globex = Organization(name="Globex")
    db.add_all([acme, globex])
    db.flush()

    procurement = OrgUnit(organization_id=acme.id, name="Procurement", org_unit_code="PROC")
    db.add(procurement)
    db.flush()

    manager_role = Role(organization_id=acme.id, name="Supplier Manager", role_code="SUPPLIER_MANAGER")
    approver_role = Role(organization_id=acme.id, name="Approver", role_code="APPROVER")
    db.add_all([manager_role, approver_role])
    db.flush()

    admin = AppUser(id=ADMIN_USER_ID, user_name="alice_admin", user_type=PrincipalType.ADMIN.value)
    manager = AppUser(id=MANAGER_USER_ID, user_name="mona_manager", user_type=PrincipalType.EMPLOYEE.value)
    clerk = AppUser(id=EMPLOYEE_USER_ID, user_name="ed_employee", user_type=PrincipalType.EMPLOYEE.value)
    supplier_user = AppUser(id=SUPPLIER_USER_ID, user_name="sam_supplier", user_type=PrincipalType.SUPPLIER.value)
    db.add_all([admin, manager, clerk, supplier_user])
    db.flush()

    db.add_all(
        [
            Employee(
                user_id=manager.id,
                organization_id=acme.id,
                employee_code="E-1001",
                first_name="Mona",
                last_name="Manager",
                email="mona.manager@example.com",
            ),
            Employee(
                user_id=clerk.id,
                organization_id=acme.id,
                employee_code="E-1002",
                first_name="Ed",
                last_name="Employee",
                email="ed.employee@example.com",
            ),
        ]
    )
    db.flush()

    db.add_all(
        [
            EmployeeOrgUnitRole(employee_user_id=manager.id, org_unit_id=procurement.id, role_id=manager_role.id),
            EmployeeOrgUnitRole(employee_user_id=manager.id, org_unit_id=procurement.id, role_id=approver_role.id),
        ]
    )

    supplier = Supplier(
        id=supplier_user.id,
        organization_id=acme.id,
        supplier_code="SUP-001",
        name="Sam's Supplies",
        contact_email="sam@supplies.example.com",
        status=SupplierStatus.PENDING_APPROVAL.value,
        created_by=clerk.id,
    )
    db.add(supplier)
    db.flush()

    db.add_all(
        [
            ApprovalRequest(
                organization_id=acme.id,
                supplier_id=supplier.id,
                requested_by_id=clerk.id,
                status=ApprovalStatus.PENDING.value,
                created_by=clerk.id,
            ),
            Document(
                organization_id=acme.id,
                owner_id=supplier_user.id,
                supplier_id=supplier.id,
                document_type="GST_CERTIFICATE",
                file_path="documents/sup-001/gst.pdf",
            ),
        ]
    )

    db.commit()
