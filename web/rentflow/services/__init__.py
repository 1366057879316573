from .access_guard import Principal, can_modify_application, ensure_can_modify_application
from .lease_service import LeaseProvisioner, ProvisionedLease, resolve_monthly_rent
from .voucher_service import VoucherIssuer, VoucherService, generate_voucher_code
from .referral_service import ReferralSettlementService, SettlementOutcome, SettlementResult
from .application_service import ApplicationStatusService, StatusTransitionResult

__all__ = [
    "Principal",
    "can_modify_application",
    "ensure_can_modify_application",
    "LeaseProvisioner",
    "ProvisionedLease",
    "resolve_monthly_rent",
    "VoucherIssuer",
    "VoucherService",
    "generate_voucher_code",
    "ReferralSettlementService",
    "SettlementOutcome",
    "SettlementResult",
    "ApplicationStatusService",
    "StatusTransitionResult",
]
