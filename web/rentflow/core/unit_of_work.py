from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.infrastructure.repositories import (
    ApplicationRepository,
    PropertyRepository,
    TenantRepository,
    LeaseRepository,
    ReferralRepository,
    VoucherRepository,
)


class UnitOfWork:
    """Unit of work grouping every repository over one session.

    Services decide where a transaction ends; the settlement chain commits
    after each step so a later failure cannot undo an earlier one.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.applications = ApplicationRepository(session)
        self.properties = PropertyRepository(session)
        self.tenants = TenantRepository(session)
        self.leases = LeaseRepository(session)
        self.referrals = ReferralRepository(session)
        self.vouchers = VoucherRepository(session)

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
