from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.core import BaseRepository
from rentflow.models import Property


class PropertyRepository(BaseRepository[Property]):
    """Property repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Property, session)
