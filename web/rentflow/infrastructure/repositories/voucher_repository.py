from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.core import BaseRepository
from rentflow.models import Voucher
from rentflow.statuses import VoucherStatus


class VoucherRepository(BaseRepository[Voucher]):
    """Voucher repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Voucher, session)

    async def get_by_code(self, code: str) -> Optional[Voucher]:
        """Get voucher by its unique code"""
        query = select(Voucher).where(Voucher.code == code).execution_options(populate_existing=True)
        return await self.session.scalar(query)

    async def get_by_owner(
        self,
        owner_id: str,
        *,
        skip: int = 0,
        limit: int = 100
    ) -> List[Voucher]:
        """Get vouchers owned by a tenant, newest first"""
        query = (
            select(Voucher)
            .where(Voucher.owner_id == owner_id)
            .order_by(Voucher.created_at.desc(), Voucher.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_by_referral(self, referral_id: int) -> List[Voucher]:
        """Get vouchers issued for a referral"""
        query = select(Voucher).where(Voucher.referral_id == referral_id).order_by(Voucher.id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def transition_status(
        self,
        voucher_id: int,
        *,
        from_status: VoucherStatus,
        to_status: VoucherStatus,
        used_at: Optional[datetime] = None
    ) -> bool:
        """Move a voucher between statuses only if it is still in *from_status*"""
        values = {"status": to_status.value}
        if used_at is not None:
            values["used_at"] = used_at
        stmt = (
            update(Voucher)
            .where(Voucher.id == voucher_id, Voucher.status == from_status.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
