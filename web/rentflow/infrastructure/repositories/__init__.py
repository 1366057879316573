from .application_repository import ApplicationRepository
from .property_repository import PropertyRepository
from .tenant_repository import TenantRepository
from .lease_repository import LeaseRepository
from .referral_repository import ReferralRepository
from .voucher_repository import VoucherRepository

__all__ = [
    "ApplicationRepository",
    "PropertyRepository",
    "TenantRepository",
    "LeaseRepository",
    "ReferralRepository",
    "VoucherRepository",
]
