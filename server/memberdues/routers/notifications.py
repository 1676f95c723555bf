from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from memberdues.auth.deps import ensure_member_access, get_current_user, require_roles
from memberdues.core.db import get_db
from memberdues.models.user import User
from memberdues.schemas.notification import NotificationLogOut, NotificationSendRequest
from memberdues.services import notifications as notifications_service
from memberdues.services.whatsapp import NotificationGateway, get_notification_gateway

ADMIN_ROLES = ("admin",)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/whatsapp", response_model=list[NotificationLogOut], status_code=status.HTTP_201_CREATED)
def send_whatsapp_notifications(
    payload: NotificationSendRequest,
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_notification_gateway),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
) -> list[NotificationLogOut]:
    logs = notifications_service.send_whatsapp_notifications(db, payload, current_user.id, gateway)
    return [NotificationLogOut.from_orm(log) for log in logs]


@router.get("", response_model=list[NotificationLogOut], status_code=status.HTTP_200_OK)
def notification_history(
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(*ADMIN_ROLES)),
) -> list[NotificationLogOut]:
    return [NotificationLogOut.from_orm(log) for log in notifications_service.get_notification_history(db)]


@router.get("/members/{member_id}", response_model=list[NotificationLogOut], status_code=status.HTTP_200_OK)
def member_notifications(
    member_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[NotificationLogOut]:
    ensure_member_access(current_user, member_id, db)
    logs = notifications_service.get_member_notifications(db, member_id)
    return [NotificationLogOut.from_orm(log) for log in logs]
