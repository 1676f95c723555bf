from typing import List, Optional

from pydantic import BaseModel, validator

from memberdues.schemas.common import money_to_float
from memberdues.schemas.member import MemberOut
from memberdues.schemas.payment import PaymentRecordOut


class MemberDashboard(BaseModel):
    member: MemberOut
    current_month_payment: Optional[PaymentRecordOut]
    recent_payments: List[PaymentRecordOut]


class AdminDashboard(BaseModel):
    total_members: int
    active_members: int
    current_month_collections: float
    pending_payments: int
    total_cash_balance: float

    @validator("current_month_collections", "total_cash_balance", pre=True)
    def convert_totals(cls, value):
        return money_to_float(value)
