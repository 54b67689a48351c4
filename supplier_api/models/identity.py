from __future__ import annotations

from datetime import datetime
import uuid

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from supplier_api.db.base import Base, SoftDeleteMixin, utcnow


class Organization(SoftDeleteMixin, Base):
    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    max_user_count: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)


class AppUser(SoftDeleteMixin, Base):
    """Authenticated principal. ``user_type`` is the principal type used as an implicit role."""

    __tablename__ = "app_users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    user_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    # Open-ended claims; a "roles" list here is honoured by ABAC subject extraction.
    extra_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    employee: Mapped[Employee | None] = relationship(back_populates="user", uselist=False)

    @property
    def principal_type(self) -> str:
        return self.user_type


class Employee(SoftDeleteMixin, Base):
    __tablename__ = "employees"

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("app_users.id"), primary_key=True)
    organization_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("organizations.id"), nullable=False, index=True)
    employee_code: Mapped[str] = mapped_column(String(50), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    user: Mapped[AppUser] = relationship(back_populates="employee")
    organization: Mapped[Organization] = relationship()


class OrgUnit(SoftDeleteMixin, Base):
    __tablename__ = "org_units"
    __table_args__ = (UniqueConstraint("organization_id", "org_unit_code"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("organizations.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    org_unit_code: Mapped[str] = mapped_column(String(50), nullable=False)
    parent_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("org_units.id"), nullable=True)


class Role(SoftDeleteMixin, Base):
    __tablename__ = "roles"
    __table_args__ = (
        UniqueConstraint("organization_id", "name"),
        UniqueConstraint("organization_id", "role_code"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("organizations.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role_code: Mapped[str | None] = mapped_column(String(50), nullable=True)


class EmployeeOrgUnitRole(SoftDeleteMixin, Base):
    """Role an employee holds within one org unit."""

    __tablename__ = "employee_org_unit_roles"
    __table_args__ = (UniqueConstraint("employee_user_id", "org_unit_id", "role_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("employees.user_id"), nullable=False, index=True)
    org_unit_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("org_units.id"), nullable=False, index=True)
    role_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("roles.id"), nullable=False, index=True)

    role: Mapped[Role] = relationship()
    org_unit: Mapped[OrgUnit] = relationship()
