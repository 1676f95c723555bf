from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from memberdues.core.config import settings
from memberdues.models.member import Member
from memberdues.models.payment_record import PaymentRecord
from memberdues.schemas.dashboard import AdminDashboard, MemberDashboard
from memberdues.schemas.member import MemberOut
from memberdues.schemas.payment import OUTSTANDING_STATUSES, PaymentRecordOut
from memberdues.services import payments as payments_service

logger = logging.getLogger(__name__)


def get_member_dashboard(db: Session, member_id: int) -> Optional[MemberDashboard]:
    try:
        member = db.get(Member, member_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("member_dashboard_failed", extra={"member_id": member_id})
        raise
    if member is None:
        return None
    current = payments_service.get_current_month_payment(db, member_id)
    recent = payments_service.get_member_payment_history(
        db, member_id, limit=settings.RECENT_PAYMENTS_LIMIT
    )
    return MemberDashboard(
        member=MemberOut.from_orm(member),
        current_month_payment=PaymentRecordOut.from_orm(current) if current else None,
        recent_payments=[PaymentRecordOut.from_orm(record) for record in recent],
    )


def get_admin_dashboard(db: Session) -> AdminDashboard:
    # Independent reads; figures are not taken from a single snapshot.
    month = payments_service.current_month_key()
    try:
        total_members = db.query(func.count(Member.id)).scalar() or 0
        active_members = (
            db.query(func.count(Member.id)).filter(Member.status == "active").scalar() or 0
        )
        collections = (
            db.query(func.sum(PaymentRecord.amount_paid))
            .filter(PaymentRecord.month == month)
            .scalar()
        )
        pending_payments = (
            db.query(func.count(PaymentRecord.id))
            .filter(PaymentRecord.month == month, PaymentRecord.status.in_(OUTSTANDING_STATUSES))
            .scalar()
            or 0
        )
        total_balance = db.query(func.sum(Member.cash_balance)).scalar()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("admin_dashboard_failed", extra={"month": month})
        raise
    return AdminDashboard(
        total_members=total_members,
        active_members=active_members,
        current_month_collections=Decimal(str(collections or 0)),
        pending_payments=pending_payments,
        total_cash_balance=Decimal(str(total_balance or 0)),
    )
