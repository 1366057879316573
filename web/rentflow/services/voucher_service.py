"""Referral reward vouchers: issuance and redemption."""

from __future__ import annotations

import logging
import secrets
import time
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.base import BaseService
from ..core.clock import Clock, utcnow
from ..core.config import Settings, get_settings
from ..core.exceptions import NotFoundError, BusinessLogicError, SettlementError
from ..core.unit_of_work import UnitOfWork
from ..models import Referral, Voucher
from ..statuses import VoucherStatus

logger = logging.getLogger(__name__)


def generate_voucher_code(prefix: str, owner_id: str) -> str:
    """Owner prefix, nanosecond issuance time and a random suffix.

    The ``vouchers.code`` unique constraint still backs this up.
    """
    owner_part = "".join(ch for ch in owner_id[:8] if ch.isalnum()).upper() or "X"
    return f"{prefix}-{owner_part}-{time.time_ns()}-{secrets.token_hex(3).upper()}"


class VoucherIssuer(BaseService):
    """Creates the reward voucher pair for a settled referral."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        settings: Optional[Settings] = None,
        clock: Clock = utcnow
    ):
        super().__init__(session)
        self.uow = UnitOfWork(session)
        self.settings = settings or get_settings()
        self.clock = clock

    async def issue_for_referral(self, referral: Referral) -> List[Voucher]:
        """Issue one voucher to the referrer and one to the referred tenant.

        Each voucher is committed on its own. A failure on the second leaves
        the first in place and is reported as ``SettlementError``.
        """
        referral_id = referral.id
        owners = [referral.referrer_id, referral.referred_id]
        issued: List[Voucher] = []

        for owner_id in owners:
            now = self.clock()
            try:
                voucher = await self.uow.vouchers.create(obj_in={
                    "code": generate_voucher_code(self.settings.VOUCHER_CODE_PREFIX, owner_id),
                    "owner_id": owner_id,
                    "discount_amount": self.settings.REFERRAL_VOUCHER_AMOUNT,
                    "discount_percent": None,
                    "status": VoucherStatus.Active.value,
                    "expires_at": now + timedelta(days=self.settings.VOUCHER_VALIDITY_DAYS),
                    "referral_id": referral_id,
                })
                await self.uow.commit()
            except SQLAlchemyError as e:
                await self.uow.rollback()
                logger.exception(
                    "Voucher for %s on referral %s not issued (%d of %d already issued)",
                    owner_id, referral_id, len(issued), len(owners)
                )
                raise SettlementError("voucher", str(e)) from e

            logger.info("Issued voucher %s to %s for referral %s", voucher.code, owner_id, referral_id)
            issued.append(voucher)

        return issued


class VoucherService(BaseService):
    """Voucher lookups and redemption for their owners."""

    def __init__(self, session: AsyncSession, *, clock: Clock = utcnow):
        super().__init__(session)
        self.uow = UnitOfWork(session)
        self.clock = clock

    async def list_for_owner(self, owner_id: str, *, skip: int = 0, limit: int = 100) -> List[Voucher]:
        return await self.uow.vouchers.get_by_owner(owner_id, skip=skip, limit=limit)

    async def _get_owned(self, code: str, owner_id: str) -> Voucher:
        voucher = await self.uow.vouchers.get_by_code(code)
        # Someone else's code reads the same as an unknown one
        if voucher is None or voucher.owner_id != owner_id:
            raise NotFoundError("Voucher", code)
        return voucher

    async def _ensure_usable(self, voucher: Voucher) -> None:
        if voucher.status != VoucherStatus.Active.value:
            raise BusinessLogicError(
                "Voucher has already been used or expired",
                rule="voucher_active"
            )

        if self.clock() > voucher.expires_at:
            await self.uow.vouchers.transition_status(
                voucher.id,
                from_status=VoucherStatus.Active,
                to_status=VoucherStatus.Expired,
            )
            await self.uow.commit()
            logger.info("Voucher %s expired on validation", voucher.code)
            raise BusinessLogicError("Voucher has expired", rule="voucher_expiry")

    async def validate(self, code: str, owner_id: str) -> Voucher:
        """Check that *code* is an active, unexpired voucher of *owner_id*.

        Raises:
            NotFoundError: If the voucher does not exist for this owner
            BusinessLogicError: If it is used, expired, or just expired now
        """
        voucher = await self._get_owned(code, owner_id)
        await self._ensure_usable(voucher)
        return voucher

    async def redeem(self, code: str, owner_id: str) -> Voucher:
        """Mark a usable voucher as Used.

        The Active -> Used step is conditional, so two concurrent redemptions
        of one code cannot both succeed.
        """
        voucher = await self._get_owned(code, owner_id)
        await self._ensure_usable(voucher)

        used_at = self.clock()
        applied = await self.uow.vouchers.transition_status(
            voucher.id,
            from_status=VoucherStatus.Active,
            to_status=VoucherStatus.Used,
            used_at=used_at,
        )
        if not applied:
            await self.uow.rollback()
            raise BusinessLogicError(
                "Voucher has already been used or expired",
                rule="voucher_active"
            )
        await self.uow.commit()

        await self.session.refresh(voucher)
        logger.info("Voucher %s redeemed by %s", voucher.code, owner_id)
        return voucher
