from __future__ import annotations

from datetime import datetime
import uuid

from pydantic import BaseModel, ConfigDict


class SupplierOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    organization_id: uuid.UUID
    supplier_code: str | None
    name: str
    contact_email: str
    status: str
    revision_number: int
    created_at: datetime
    updated_at: datetime


class ApprovalRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    organization_id: uuid.UUID
    supplier_id: uuid.UUID
    requested_by_id: uuid.UUID | None
    status: str
    created_at: datetime
    completed_at: datetime | None


class DocumentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    organization_id: uuid.UUID
    owner_id: uuid.UUID | None
    supplier_id: uuid.UUID | None
    document_type: str
    file_path: str
    status: str
