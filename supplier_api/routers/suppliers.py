from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from supplier_api.abac import Action, ResourceType
from supplier_api.db.base import utcnow
from supplier_api.db.session import get_db
from supplier_api.models.supplier import ApprovalRequest, ApprovalStatus, Document, Supplier, SupplierStatus
from supplier_api.schemas.supplier import ApprovalRequestOut, DocumentOut, SupplierOut
from supplier_api.security.context import AuthorizedRequest
from supplier_api.security.dependencies import require_permission

router = APIRouter(tags=["suppliers"])


def _path_uuid(request: Request, name: str) -> uuid.UUID:
    try:
        return uuid.UUID(request.path_params[name])
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found") from exc


def load_supplier(request: Request, db: Session) -> Supplier | None:
    key = _path_uuid(request, "supplier_id")
    return db.scalars(select(Supplier).where(Supplier.id == key)).first()


def load_approval_request(request: Request, db: Session) -> ApprovalRequest | None:
    key = _path_uuid(request, "request_id")
    return db.scalars(select(ApprovalRequest).where(ApprovalRequest.id == key)).first()


def load_document(request: Request, db: Session) -> Document | None:
    key = _path_uuid(request, "document_id")
    return db.scalars(select(Document).where(Document.id == key)).first()


@router.get("/suppliers/{supplier_id}", response_model=SupplierOut)
def get_supplier(
    access: AuthorizedRequest = Depends(require_permission(ResourceType.SUPPLIER, Action.VIEW, load_supplier)),
) -> Supplier:
    return access.resource


@router.post("/suppliers/{supplier_id}/approve", response_model=SupplierOut)
def approve_supplier(
    access: AuthorizedRequest = Depends(require_permission(ResourceType.SUPPLIER, Action.APPROVE, load_supplier)),
    db: Session = Depends(get_db),
) -> Supplier:
    supplier: Supplier = access.resource
    supplier.status = SupplierStatus.ACTIVE.value
    supplier.last_updated_by = uuid.UUID(access.subject.id)
    db.commit()
    db.refresh(supplier)
    return supplier


@router.delete("/suppliers/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_supplier(
    access: AuthorizedRequest = Depends(require_permission(ResourceType.SUPPLIER, Action.DELETE, load_supplier)),
    db: Session = Depends(get_db),
) -> None:
    access.resource.soft_delete()
    db.commit()


@router.get("/approval-requests/{request_id}", response_model=ApprovalRequestOut)
def get_approval_request(
    access: AuthorizedRequest = Depends(
        require_permission(ResourceType.APPROVAL_REQUEST, Action.VIEW, load_approval_request)
    ),
) -> ApprovalRequest:
    return access.resource


@router.post("/approval-requests/{request_id}/approve", response_model=ApprovalRequestOut)
def approve_request(
    access: AuthorizedRequest = Depends(
        require_permission(ResourceType.APPROVAL_REQUEST, Action.APPROVE, load_approval_request)
    ),
    db: Session = Depends(get_db),
) -> ApprovalRequest:
    approval: ApprovalRequest = access.resource
    approval.status = ApprovalStatus.APPROVED.value
    approval.completed_at = utcnow()
    db.commit()
    db.refresh(approval)
    return approval


@router.get("/documents/{document_id}", response_model=DocumentOut)
def get_document(
    access: AuthorizedRequest = Depends(require_permission(ResourceType.DOCUMENT, Action.VIEW, load_document)),
) -> Document:
    return access.resource
