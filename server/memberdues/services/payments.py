from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, contains_eager

from memberdues.models.member import Member
from memberdues.models.payment_record import PaymentRecord
from memberdues.schemas.payment import OUTSTANDING_STATUSES, PaymentRecordCreate, PaymentRecordUpdate

logger = logging.getLogger(__name__)


def current_month_key(now: Optional[datetime] = None) -> str:
    """Return the YYYY-MM key of the current UTC calendar month."""
    return (now or datetime.now(timezone.utc)).strftime("%Y-%m")


def parse_month_key(month: str) -> tuple[int, int]:
    year, month_number = month.split("-", 1)
    return int(year), int(month_number)


def get_payments_by_month(db: Session, month: str) -> list[PaymentRecord]:
    try:
        return (
            db.query(PaymentRecord)
            .filter(PaymentRecord.month == month)
            .order_by(PaymentRecord.created_at.desc(), PaymentRecord.id.desc())
            .all()
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("payment_list_failed", extra={"month": month})
        raise


def get_member_payment_history(db: Session, member_id: int, *, limit: Optional[int] = None) -> list[PaymentRecord]:
    try:
        query = (
            db.query(PaymentRecord)
            .filter(PaymentRecord.member_id == member_id)
            .order_by(PaymentRecord.year.desc(), PaymentRecord.month_number.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("payment_history_failed", extra={"member_id": member_id})
        raise


def get_payment_for_month(db: Session, member_id: int, month: str) -> Optional[PaymentRecord]:
    try:
        return (
            db.query(PaymentRecord)
            .filter(PaymentRecord.member_id == member_id, PaymentRecord.month == month)
            .first()
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("payment_lookup_failed", extra={"member_id": member_id, "month": month})
        raise


def get_current_month_payment(db: Session, member_id: int) -> Optional[PaymentRecord]:
    return get_payment_for_month(db, member_id, current_month_key())


def record_payment(db: Session, payload: PaymentRecordCreate, admin_id: int) -> PaymentRecord:
    member = db.get(Member, payload.member_id)
    if member is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")

    if get_payment_for_month(db, member.id, payload.month) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Payment record for {payload.month} already exists for this member (duplicate)",
        )

    year, month_number = parse_month_key(payload.month)
    record = PaymentRecord(
        member_id=member.id,
        month=payload.month,
        year=year,
        month_number=month_number,
        amount_due=payload.amount_due,
        amount_paid=payload.amount_paid,
        status=payload.status,
        payment_date=payload.payment_date,
        recorded_by=admin_id,
        notes=payload.notes,
    )
    try:
        db.add(record)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(
            "payment_record_failed",
            extra={"member_id": member.id, "month": payload.month},
        )
        raise
    db.refresh(record)
    logger.info(
        "payment_recorded",
        extra={
            "payment_id": record.id,
            "member_id": record.member_id,
            "month": record.month,
            "status": record.status,
            "recorded_by": admin_id,
        },
    )
    return record


def update_payment(
    db: Session,
    payment_id: int,
    payload: PaymentRecordUpdate,
    admin_id: int,
) -> Optional[PaymentRecord]:
    record = db.get(PaymentRecord, payment_id)
    if record is None:
        return None

    changes = payload.dict(exclude_unset=True)
    # amount_paid and status are NOT NULL; payment_date and notes may be cleared.
    for field in ("amount_paid", "status"):
        if changes.get(field) is not None:
            setattr(record, field, changes[field])
    for field in ("payment_date", "notes"):
        if field in changes:
            setattr(record, field, changes[field])
    record.updated_at = datetime.utcnow()

    try:
        db.add(record)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("payment_update_failed", extra={"payment_id": payment_id})
        raise
    db.refresh(record)
    logger.info(
        "payment_updated",
        extra={"payment_id": record.id, "status": record.status, "updated_by": admin_id},
    )
    return record


def get_members_with_outstanding_payments(db: Session, month: str) -> list[PaymentRecord]:
    try:
        return (
            db.query(PaymentRecord)
            .join(PaymentRecord.member)
            .options(contains_eager(PaymentRecord.member))
            .filter(PaymentRecord.month == month, PaymentRecord.status.in_(OUTSTANDING_STATUSES))
            .order_by(Member.name.asc(), PaymentRecord.id.asc())
            .all()
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("outstanding_payments_failed", extra={"month": month})
        raise
