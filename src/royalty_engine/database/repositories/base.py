"""
Base Repository
Common CRUD operations for all entities
"""

import uuid
from typing import Generic, TypeVar, Type, Optional, Dict, Any, Union

from pydantic import BaseModel
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from ..connection import Base

# Type variables for generic repository
ModelType = TypeVar("ModelType", bound=Base)


class RepositoryError(Exception):
    """Base repository error"""
    pass


class ConflictError(RepositoryError):
    """Data conflict error"""
    pass


class BaseRepository(Generic[ModelType]):
    """Base repository with common CRUD operations"""

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def create(self, obj_in: Union[BaseModel, Dict[str, Any]], **kwargs) -> ModelType:
        """Create a new entity"""
        try:
            if isinstance(obj_in, BaseModel):
                obj_data = obj_in.model_dump()
            else:
                obj_data = dict(obj_in)

            # Add any additional kwargs
            obj_data.update(kwargs)

            db_obj = self.model(**obj_data)
            self.session.add(db_obj)
            await self.session.flush()
            await self.session.refresh(db_obj)
            return db_obj

        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError(f"Data conflict: {str(e)}")
        except Exception as e:
            await self.session.rollback()
            raise RepositoryError(f"Error creating {self.model.__name__}: {str(e)}")

    async def get(self, id: uuid.UUID) -> Optional[ModelType]:
        """Get entity by ID"""
        try:
            result = await self.session.execute(
                select(self.model).where(self.model.id == id)
            )
            return result.scalar_one_or_none()
        except Exception as e:
            raise RepositoryError(f"Error getting entity: {str(e)}")

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count entities with optional filters"""
        try:
            query = select(func.count(self.model.id))

            if filters:
                for field, value in filters.items():
                    if hasattr(self.model, field):
                        query = query.where(getattr(self.model, field) == value)

            result = await self.session.execute(query)
            return result.scalar() or 0

        except Exception as e:
            raise RepositoryError(f"Error counting entities: {str(e)}")
