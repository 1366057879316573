from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.core import BaseRepository
from rentflow.models import Lease


class LeaseRepository(BaseRepository[Lease]):
    """Lease repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Lease, session)

    async def get_active(
        self,
        property_id: int,
        tenant_id: str,
        at: datetime
    ) -> Optional[Lease]:
        """Get the lease for (property, tenant) whose term contains *at*"""
        query = (
            select(Lease)
            .where(
                Lease.property_id == property_id,
                Lease.tenant_id == tenant_id,
                Lease.start_date <= at,
                Lease.end_date >= at,
            )
            .order_by(Lease.start_date.desc(), Lease.id.desc())
            .limit(1)
        )
        return await self.session.scalar(query)
