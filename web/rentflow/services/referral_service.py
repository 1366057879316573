"""Referral settlement once a referred tenant's application is approved."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.base import BaseService
from ..core.clock import Clock, utcnow
from ..core.config import Settings
from ..core.exceptions import SettlementError
from ..core.unit_of_work import UnitOfWork
from ..models import Voucher
from .voucher_service import VoucherIssuer

logger = logging.getLogger(__name__)


class SettlementOutcome(str, Enum):
    no_referral_code = "no_referral_code"
    referral_not_found = "referral_not_found"
    already_completed = "already_completed"
    lost_race = "lost_race"
    settled = "settled"


@dataclass
class SettlementResult:
    outcome: SettlementOutcome
    referral_id: Optional[int] = None
    vouchers: List[Voucher] = field(default_factory=list)


class ReferralSettlementService(BaseService):
    """Completes a tenant's pending referral at most once and rewards both sides."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        settings: Optional[Settings] = None,
        clock: Clock = utcnow
    ):
        super().__init__(session)
        self.uow = UnitOfWork(session)
        self.clock = clock
        self.issuer = VoucherIssuer(session, settings=settings, clock=clock)

    async def settle_for_tenant(self, tenant_id: str) -> SettlementResult:
        """Settle the referral the tenant signed up with, if there is one.

        The completion flag is flipped with a compare-and-set; only the
        request that wins it issues vouchers.

        Raises:
            SettlementError: If the store fails or voucher issuance fails
        """
        try:
            code = await self.uow.tenants.get_referred_by_code(tenant_id)
            if not code:
                return SettlementResult(SettlementOutcome.no_referral_code)

            referral = await self.uow.referrals.get_by_code(code)
            if referral is None:
                logger.info("Tenant %s used unknown referral code %s", tenant_id, code)
                return SettlementResult(SettlementOutcome.referral_not_found)

            # Plain value: losing the race rolls back and expires the referral
            referral_id = referral.id
            if referral.is_completed:
                return SettlementResult(SettlementOutcome.already_completed, referral_id)

            won = await self.uow.referrals.complete_if_pending(referral_id, self.clock())
            if not won:
                await self.uow.rollback()
                logger.info("Referral %s completed by a concurrent request", referral_id)
                return SettlementResult(SettlementOutcome.lost_race, referral_id)
            await self.uow.commit()
        except SQLAlchemyError as e:
            await self.uow.rollback()
            raise SettlementError("referral", str(e)) from e

        logger.info("Referral %s completed; issuing vouchers", referral_id)
        vouchers = await self.issuer.issue_for_referral(referral)
        return SettlementResult(SettlementOutcome.settled, referral_id, vouchers)
