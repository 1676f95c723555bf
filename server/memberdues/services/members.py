from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from memberdues.auth.security import hash_password
from memberdues.models.member import Member
from memberdues.models.notification_log import NotificationLog
from memberdues.models.payment_record import PaymentRecord
from memberdues.models.user import User
from memberdues.schemas.member import MemberCreate, MemberUpdate

logger = logging.getLogger(__name__)

# Columns that reject NULL; an explicit null in a partial update is ignored.
_UPDATABLE_FIELDS = ("name", "phone", "email", "status", "cash_balance")


def _email_conflict() -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already in use")


def _ensure_email_available(
    db: Session,
    email: str,
    *,
    exclude_member_id: Optional[int] = None,
    exclude_user_id: Optional[int] = None,
) -> None:
    normalized = email.lower()
    member_query = db.query(Member.id).filter(func.lower(Member.email) == normalized)
    if exclude_member_id is not None:
        member_query = member_query.filter(Member.id != exclude_member_id)
    user_query = db.query(User.id).filter(func.lower(User.email) == normalized)
    if exclude_user_id is not None:
        user_query = user_query.filter(User.id != exclude_user_id)
    if member_query.first() or user_query.first():
        raise _email_conflict()


def list_members(db: Session) -> list[Member]:
    try:
        return db.query(Member).order_by(Member.id.asc()).all()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("member_list_failed")
        raise


def get_member(db: Session, member_id: int) -> Optional[Member]:
    try:
        return db.get(Member, member_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("member_lookup_failed", extra={"member_id": member_id})
        raise


def get_member_by_user(db: Session, user_id: int) -> Optional[Member]:
    try:
        return db.query(Member).filter(Member.user_id == user_id).first()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("member_lookup_failed", extra={"user_id": user_id})
        raise


def create_member(db: Session, payload: MemberCreate) -> Member:
    """Create the login account and the member profile in one transaction."""
    _ensure_email_available(db, payload.email)
    try:
        user = User(
            email=payload.email,
            hashed_password=hash_password(payload.password),
            role="member",
        )
        db.add(user)
        db.flush()

        member = Member(
            name=payload.name,
            phone=payload.phone,
            email=payload.email,
            status=payload.status,
            cash_balance=payload.cash_balance,
            user_id=user.id,
        )
        db.add(member)
        db.flush()
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("member_create_conflict", extra={"email": payload.email})
        raise _email_conflict() from exc
    except SQLAlchemyError:
        db.rollback()
        logger.exception("member_create_failed", extra={"email": payload.email})
        raise
    db.refresh(member)
    logger.info("member_created", extra={"member_id": member.id, "user_id": member.user_id})
    return member


def update_member(db: Session, member_id: int, payload: MemberUpdate) -> Optional[Member]:
    member = db.get(Member, member_id)
    if member is None:
        return None

    changes = {
        field: value
        for field, value in payload.dict(exclude_unset=True).items()
        if field in _UPDATABLE_FIELDS and value is not None
    }
    if "email" in changes and changes["email"].lower() != member.email.lower():
        _ensure_email_available(
            db,
            changes["email"],
            exclude_member_id=member.id,
            exclude_user_id=member.user_id,
        )

    try:
        for field, value in changes.items():
            setattr(member, field, value)
        if "email" in changes and member.user is not None:
            member.user.email = changes["email"]
        member.updated_at = datetime.utcnow()
        db.add(member)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("member_update_conflict", extra={"member_id": member_id})
        raise _email_conflict() from exc
    except SQLAlchemyError:
        db.rollback()
        logger.exception("member_update_failed", extra={"member_id": member_id})
        raise
    db.refresh(member)
    return member


def delete_member(db: Session, member_id: int) -> bool:
    """Remove a member with its notifications, payments and login account."""
    member = db.get(Member, member_id)
    if member is None:
        return False

    user_id = member.user_id
    try:
        db.query(NotificationLog).filter(NotificationLog.member_id == member_id).delete(
            synchronize_session=False
        )
        db.query(PaymentRecord).filter(PaymentRecord.member_id == member_id).delete(
            synchronize_session=False
        )
        db.delete(member)
        db.flush()
        user = db.get(User, user_id)
        if user is not None:
            db.delete(user)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("member_delete_failed", extra={"member_id": member_id})
        raise
    logger.info("member_deleted", extra={"member_id": member_id, "user_id": user_id})
    return True
