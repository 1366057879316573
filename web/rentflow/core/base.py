from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Optional, Any, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase

ModelType = TypeVar('ModelType', bound=DeclarativeBase)


class IRepository(ABC, Generic[ModelType]):
    """Base repository interface"""

    @abstractmethod
    async def get(self, id: Any) -> Optional[ModelType]:
        """Get entity by ID"""
        pass

    @abstractmethod
    async def create(self, *, obj_in: Dict[str, Any]) -> ModelType:
        """Create new entity"""
        pass


class BaseRepository(IRepository[ModelType], Generic[ModelType]):
    """Base repository implementation with common CRUD operations.

    Repositories only flush; committing is the caller's decision so that a
    service can choose where its transaction boundaries fall.
    """

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def get(self, id: Any) -> Optional[ModelType]:
        """Get entity by ID"""
        return await self.session.get(self.model, id)

    async def create(self, *, obj_in: Dict[str, Any]) -> ModelType:
        """Create new entity"""
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        await self.session.flush()
        return db_obj


class IService(ABC):
    """Base service interface"""
    pass


class BaseService(IService):
    """Base service implementation with common dependencies"""

    def __init__(self, session: AsyncSession):
        self.session = session
