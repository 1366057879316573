"""Voucher request/response models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class VoucherCodeIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: str = Field(..., min_length=1, max_length=80)


class VoucherOut(BaseModel):
    id: int
    code: str
    discount_amount: Decimal
    discount_percent: Optional[Decimal] = None
    status: str
    expires_at: datetime
    used_at: Optional[datetime] = None
    referral_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }


class VoucherValidationOut(BaseModel):
    valid: bool
    voucher: VoucherOut


class VoucherRedeemOut(BaseModel):
    message: str
    voucher: VoucherOut
