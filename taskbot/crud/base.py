"""Generic async CRUD helpers."""
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from taskbot.database import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=Union[BaseModel, dict])
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=Union[BaseModel, dict])


def _as_dict(obj_in: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(obj_in, dict):
        return dict(obj_in)
    return obj_in.model_dump()


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """CRUD object with default methods to Create, Read and Upsert."""

    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get_multi(
        self,
        db: AsyncSession,
        *,
        skip: int = 0,
        limit: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[Sequence[Any]] = None,
    ) -> List[ModelType]:
        """Get rows matching equality filters, optionally ordered."""
        query = select(self.model)
        for field, value in (filters or {}).items():
            query = query.where(getattr(self.model, field) == value)
        if order_by:
            query = query.order_by(*order_by)
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def create(self, db: AsyncSession, *, obj_in: CreateSchemaType) -> ModelType:
        """Insert a new row."""
        db_obj = self.model(**_as_dict(obj_in))
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def upsert(
        self,
        db: AsyncSession,
        *,
        values: Dict[str, Any],
        conflict_columns: Sequence[str],
        update_columns: Optional[Sequence[str]] = None,
    ) -> None:
        """INSERT .. ON CONFLICT on a unique key.

        With no ``update_columns`` an existing row is left untouched.
        """
        dialect = db.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = postgresql.insert(self.model).values(**values)
        elif dialect == "sqlite":
            stmt = sqlite.insert(self.model).values(**values)
        else:
            raise NotImplementedError(f"Upsert is not supported on {dialect}")

        if update_columns:
            stmt = stmt.on_conflict_do_update(
                index_elements=list(conflict_columns),
                set_={column: stmt.excluded[column] for column in update_columns},
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))
        await db.execute(stmt)
        await db.commit()
