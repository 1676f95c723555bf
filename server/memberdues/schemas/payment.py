from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, validator

from memberdues.schemas.common import money_to_float, validate_month_key
from memberdues.schemas.member import MemberOut

PaymentStatus = Literal["paid", "unpaid", "partial"]
OUTSTANDING_STATUSES: tuple[str, ...] = ("unpaid", "partial")


class PaymentRecordCreate(BaseModel):
    member_id: int
    month: str
    amount_due: Decimal = Field(..., gt=0)
    amount_paid: Decimal = Field(..., ge=0)
    status: PaymentStatus
    payment_date: Optional[datetime] = None
    notes: Optional[str] = None

    @validator("month")
    def validate_month(cls, value: str) -> str:
        return validate_month_key(value)


class PaymentRecordUpdate(BaseModel):
    amount_paid: Optional[Decimal] = Field(None, ge=0)
    status: Optional[PaymentStatus] = None
    payment_date: Optional[datetime] = None
    notes: Optional[str] = None


class PaymentRecordOut(BaseModel):
    id: int
    member_id: int
    month: str
    year: int
    month_number: int
    amount_due: float
    amount_paid: float
    status: PaymentStatus
    payment_date: Optional[datetime]
    recorded_by: int
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    @validator("amount_due", "amount_paid", pre=True)
    def convert_amounts(cls, value):
        return money_to_float(value)

    class Config:
        from_attributes = True


class OutstandingPaymentOut(PaymentRecordOut):
    member: MemberOut
