"""Application status request/response models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class ApplicationStatusUpdate(BaseModel):
    """Body of a status change: one JSON field, nothing else accepted."""
    model_config = ConfigDict(extra="forbid")

    status: StrictStr = Field(..., min_length=1, max_length=32, description="Pending, Approved or Denied (any case)")


class PropertyOut(BaseModel):
    id: int
    name: str
    manager_id: str
    price_per_month: Optional[Decimal] = None
    price: Optional[Decimal] = None

    model_config = {
        "from_attributes": True,
    }


class RoomOut(BaseModel):
    id: int
    name: str
    price_per_month: Optional[Decimal] = None

    model_config = {
        "from_attributes": True,
    }


class TenantOut(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }


class LeaseOut(BaseModel):
    id: int
    property_id: int
    tenant_id: str
    start_date: datetime
    end_date: datetime
    rent_amount: Decimal
    deposit_amount: Decimal

    model_config = {
        "from_attributes": True,
    }


class ApplicationOut(BaseModel):
    id: int
    status: str
    applied_at: Optional[datetime] = None
    property_id: int
    room_id: Optional[int] = None
    tenant_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    property: PropertyOut
    room: Optional[RoomOut] = None
    tenant: Optional[TenantOut] = None
    lease: Optional[LeaseOut] = None

    model_config = {
        "from_attributes": True,
    }
