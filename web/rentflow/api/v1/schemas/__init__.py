from .application_schemas import (
    ApplicationStatusUpdate, ApplicationOut, PropertyOut, RoomOut, TenantOut, LeaseOut
)
from .voucher_schemas import VoucherCodeIn, VoucherOut, VoucherValidationOut, VoucherRedeemOut

__all__ = [
    # Application schemas
    "ApplicationStatusUpdate",
    "ApplicationOut",
    "PropertyOut",
    "RoomOut",
    "TenantOut",
    "LeaseOut",

    # Voucher schemas
    "VoucherCodeIn",
    "VoucherOut",
    "VoucherValidationOut",
    "VoucherRedeemOut",
]
