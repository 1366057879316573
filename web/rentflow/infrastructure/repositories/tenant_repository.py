from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.core import BaseRepository
from rentflow.models import Tenant


class TenantRepository(BaseRepository[Tenant]):
    """Tenant repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Tenant, session)

    async def get_referred_by_code(self, tenant_id: str) -> Optional[str]:
        """Return the referral code the tenant signed up with, if any"""
        query = select(Tenant.referred_by_code).where(Tenant.id == tenant_id)
        return await self.session.scalar(query)
