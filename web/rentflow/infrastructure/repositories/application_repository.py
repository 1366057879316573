from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rentflow.core import BaseRepository
from rentflow.models import Application
from rentflow.statuses import ApplicationStatus


class ApplicationRepository(BaseRepository[Application]):
    """Application repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Application, session)

    async def get_with_details(self, application_id: int) -> Optional[Application]:
        """Get application with property, room and tenant loaded"""
        query = (
            select(Application)
            .options(
                selectinload(Application.property),
                selectinload(Application.room),
                selectinload(Application.tenant),
            )
            .where(Application.id == application_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def update_status(self, application_id: int, status: ApplicationStatus) -> bool:
        """Set the status in a single UPDATE; False when the row is gone"""
        stmt = (
            update(Application)
            .where(Application.id == application_id)
            .values(status=status.value)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
