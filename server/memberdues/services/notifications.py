from __future__ import annotations

import logging
from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from memberdues.models.member import Member
from memberdues.models.notification_log import NotificationLog
from memberdues.schemas.notification import NotificationSendRequest
from memberdues.services.whatsapp import DeliveryResult, NotificationGateway

logger = logging.getLogger(__name__)


def _load_members(db: Session, member_ids: list[int]) -> dict[int, Member]:
    try:
        rows = db.query(Member).filter(Member.id.in_(member_ids)).all()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("notification_members_lookup_failed", extra={"member_ids": member_ids})
        raise
    return {member.id: member for member in rows}


def send_whatsapp_notifications(
    db: Session,
    payload: NotificationSendRequest,
    admin_id: int,
    gateway: NotificationGateway,
) -> list[NotificationLog]:
    """Deliver one message per target member and log each delivery result.

    Every message goes out before the log rows are written, so no provider
    call happens while the write transaction is open. If the log write then
    fails, the delivered results are kept in the application log instead.
    """
    target_ids = list(dict.fromkeys(payload.member_ids))
    members = _load_members(db, target_ids)
    missing = [member_id for member_id in target_ids if member_id not in members]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Member not found: {', '.join(str(member_id) for member_id in missing)}",
        )

    deliveries: list[tuple[int, DeliveryResult, datetime]] = []
    for member_id in target_ids:
        result = gateway.send(members[member_id], payload.message)
        deliveries.append((member_id, result, datetime.utcnow()))

    logs: list[NotificationLog] = []
    try:
        for member_id, result, sent_at in deliveries:
            log = NotificationLog(
                member_id=member_id,
                type=payload.type,
                message=payload.message,
                sent_at=sent_at,
                sent_by=admin_id,
                status=result.status,
            )
            db.add(log)
            logs.append(log)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(
            "notification_log_failed",
            extra={
                "type": payload.type,
                "deliveries": {member_id: result.status for member_id, result, _ in deliveries},
                "sent_by": admin_id,
            },
        )
        raise

    for log in logs:
        db.refresh(log)
    logger.info(
        "notifications_sent",
        extra={
            "type": payload.type,
            "sent": sum(1 for log in logs if log.status == "sent"),
            "failed": sum(1 for log in logs if log.status == "failed"),
            "sent_by": admin_id,
        },
    )
    return logs


def get_notification_history(db: Session) -> list[NotificationLog]:
    try:
        return (
            db.query(NotificationLog)
            .order_by(NotificationLog.sent_at.desc(), NotificationLog.id.desc())
            .all()
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("notification_history_failed")
        raise


def get_member_notifications(db: Session, member_id: int) -> list[NotificationLog]:
    try:
        return (
            db.query(NotificationLog)
            .filter(NotificationLog.member_id == member_id)
            .order_by(NotificationLog.sent_at.desc(), NotificationLog.id.desc())
            .all()
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("member_notifications_failed", extra={"member_id": member_id})
        raise
