from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.core import BaseRepository
from rentflow.models import Referral


class ReferralRepository(BaseRepository[Referral]):
    """Referral repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Referral, session)

    async def get_by_code(self, code: str) -> Optional[Referral]:
        """Get referral by its unique code"""
        # Always the stored row: completion is flipped by UPDATEs that bypass the identity map
        query = select(Referral).where(Referral.code == code).execution_options(populate_existing=True)
        return await self.session.scalar(query)

    async def complete_if_pending(self, referral_id: int, completed_at: datetime) -> bool:
        """Compare-and-set ``is_completed`` from false to true.

        Runs as one conditional UPDATE so that only one of several concurrent
        callers sees a row affected. Returns True for that caller only.
        """
        stmt = (
            update(Referral)
            .where(Referral.id == referral_id, Referral.is_completed.is_(False))
            .values(
                is_completed=True,
                completed_at=completed_at,
                voucher_generated=True,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
