from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, Field

NotificationType = Literal["payment_reminder", "balance_info"]
NotificationStatus = Literal["sent", "failed"]


class NotificationSendRequest(BaseModel):
    member_ids: List[int] = Field(..., min_length=1)
    type: NotificationType
    message: str = Field(..., min_length=1)


class NotificationLogOut(BaseModel):
    id: int
    member_id: int
    type: NotificationType
    message: str
    sent_at: datetime
    sent_by: int
    status: NotificationStatus

    class Config:
        from_attributes = True
