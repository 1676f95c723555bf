from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Text

from memberdues.core.db import Base

NotificationType = Enum("payment_reminder", "balance_info", name="notification_type")
NotificationStatus = Enum("sent", "failed", name="notification_status")


class NotificationLog(Base):
    __tablename__ = "notification_logs"

    id = Column(Integer, primary_key=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    type = Column(NotificationType, nullable=False)
    message = Column(Text, nullable=False)
    sent_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    sent_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(NotificationStatus, nullable=False, default="sent")
