from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, validator

from memberdues.schemas.common import money_to_float

MemberStatus = Literal["active", "inactive", "suspended"]


class MemberBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=10, max_length=50)
    email: EmailStr
    status: MemberStatus = "active"


class MemberCreate(MemberBase):
    cash_balance: Decimal = Decimal("0")
    password: str = Field(..., min_length=6)


class MemberUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, min_length=10, max_length=50)
    email: Optional[EmailStr] = None
    status: Optional[MemberStatus] = None
    cash_balance: Optional[Decimal] = None


class MemberOut(BaseModel):
    # Plain strings: stored rows are returned as they are, even when older
    # data would not pass the input rules.
    id: int
    name: str
    phone: str
    email: str
    status: MemberStatus
    cash_balance: float
    user_id: int
    created_at: datetime
    updated_at: datetime

    @validator("cash_balance", pre=True)
    def convert_balance(cls, value):
        return money_to_float(value)

    class Config:
        from_attributes = True
