from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from memberdues.auth.deps import ensure_member_access, get_current_user, require_roles
from memberdues.core.db import get_db
from memberdues.models.user import User
from memberdues.schemas.common import MONTH_PATTERN
from memberdues.schemas.payment import (
    OutstandingPaymentOut,
    PaymentRecordCreate,
    PaymentRecordOut,
    PaymentRecordUpdate,
)
from memberdues.services import payments as payments_service

ADMIN_ROLES = ("admin",)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("", response_model=list[PaymentRecordOut], status_code=status.HTTP_200_OK)
def list_payments_by_month(
    month: str = Query(..., pattern=MONTH_PATTERN),
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(*ADMIN_ROLES)),
) -> list[PaymentRecordOut]:
    records = payments_service.get_payments_by_month(db, month)
    return [PaymentRecordOut.from_orm(record) for record in records]


@router.post("", response_model=PaymentRecordOut, status_code=status.HTTP_201_CREATED)
def record_payment(
    payload: PaymentRecordCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
) -> PaymentRecordOut:
    record = payments_service.record_payment(db, payload, current_user.id)
    return PaymentRecordOut.from_orm(record)


@router.get("/outstanding", response_model=list[OutstandingPaymentOut], status_code=status.HTTP_200_OK)
def list_outstanding_payments(
    month: str = Query(..., pattern=MONTH_PATTERN),
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(*ADMIN_ROLES)),
) -> list[OutstandingPaymentOut]:
    records = payments_service.get_members_with_outstanding_payments(db, month)
    return [OutstandingPaymentOut.from_orm(record) for record in records]


@router.get("/members/{member_id}/history", response_model=list[PaymentRecordOut], status_code=status.HTTP_200_OK)
def member_payment_history(
    member_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[PaymentRecordOut]:
    ensure_member_access(current_user, member_id, db)
    records = payments_service.get_member_payment_history(db, member_id)
    return [PaymentRecordOut.from_orm(record) for record in records]


@router.get("/members/{member_id}/current", response_model=PaymentRecordOut | None, status_code=status.HTTP_200_OK)
def member_current_month_payment(
    member_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PaymentRecordOut | None:
    ensure_member_access(current_user, member_id, db)
    record = payments_service.get_current_month_payment(db, member_id)
    return PaymentRecordOut.from_orm(record) if record else None


@router.patch("/{payment_id}", response_model=PaymentRecordOut, status_code=status.HTTP_200_OK)
def update_payment(
    payment_id: int,
    payload: PaymentRecordUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
) -> PaymentRecordOut:
    record = payments_service.update_payment(db, payment_id, payload, current_user.id)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment record not found")
    return PaymentRecordOut.from_orm(record)
