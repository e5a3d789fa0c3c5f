"""
Table-style data access.

CRUDBase wraps one ORM model with the handful of operations every screen
uses: select with equality filters / ordering / limit, insert, update,
delete. Each successful write is committed immediately and announced on
the change feed; nothing is checked against other rows first.
"""

import logging
from typing import Any, Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from servelink.database import Base
from servelink.models import (
    MenuCategory,
    MenuItem,
    Order,
    OrderItem,
    Profile,
    Restaurant,
    RestaurantTable,
)
from servelink.services.realtime import ChangeEvent, ChangeType, get_change_feed

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class CRUDBase(Generic[ModelType]):
    def __init__(self, model: Type[ModelType], id_field: str = "id"):
        self.model = model
        self.id_field = id_field
        self.table = model.__tablename__

    def _pk(self, obj: ModelType) -> str:
        return str(getattr(obj, self.id_field))

    async def _announce(self, event: ChangeType, obj: ModelType) -> None:
        await get_change_feed().publish(
            ChangeEvent(
                table=self.table,
                event=event,
                id=self._pk(obj),
                restaurant_id=getattr(obj, "restaurant_id", None),
            )
        )

    # ---------------- GET ----------------
    async def get(self, db: AsyncSession, id: str, restaurant_id: Optional[str] = None) -> ModelType:
        """
        Fetch one row or raise 404.

        When restaurant_id is given, rows of other restaurants count as
        missing.
        """
        pk_column = getattr(self.model, self.id_field)
        query = select(self.model).where(pk_column == id).execution_options(populate_existing=True)
        if restaurant_id is not None:
            query = query.where(self.model.restaurant_id == restaurant_id)
        obj = (await db.execute(query)).scalar_one_or_none()
        if not obj:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"{self.model.__name__} with {self.id_field}={id} not found"
            )
        return obj

    # ---------------- GET ALL ----------------
    async def get_all(
        self,
        db: AsyncSession,
        filters: Optional[dict[str, Any]] = None,
        where: Sequence[Any] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[ModelType]:
        query = select(self.model)
        for key, value in (filters or {}).items():
            if value is not None:
                query = query.where(getattr(self.model, key) == value)
        for clause in where:
            query = query.where(clause)
        if order_by:
            column = getattr(self.model, order_by)
            query = query.order_by(column.desc() if descending else column.asc())
        if limit:
            query = query.limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def count(self, db: AsyncSession, filters: Optional[dict[str, Any]] = None) -> int:
        pk_column = getattr(self.model, self.id_field)
        query = select(func.count(pk_column))
        for key, value in (filters or {}).items():
            if value is not None:
                query = query.where(getattr(self.model, key) == value)
        return (await db.execute(query)).scalar() or 0

    # ---------------- CREATE ----------------
    async def create(self, db: AsyncSession, data: dict[str, Any]) -> ModelType:
        obj = self.model(**data)
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
        logger.info(f"Inserted {self.table} row {self._pk(obj)}")
        await self._announce(ChangeType.INSERT, obj)
        return obj

    async def create_many(self, db: AsyncSession, rows: Iterable[dict[str, Any]]) -> List[ModelType]:
        """Insert a batch in one commit: all rows land or none do."""
        objs = [self.model(**row) for row in rows]
        db.add_all(objs)
        await db.commit()
        for obj in objs:
            await db.refresh(obj)
        logger.info(f"Inserted {len(objs)} {self.table} row(s)")
        for obj in objs:
            await self._announce(ChangeType.INSERT, obj)
        return objs

    # ---------------- UPDATE ----------------
    async def update(self, db: AsyncSession, db_obj: ModelType, data: dict[str, Any]) -> ModelType:
        for key, value in data.items():
            setattr(db_obj, key, value)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        logger.info(f"Updated {self.table} row {self._pk(db_obj)}: {sorted(data)}")
        await self._announce(ChangeType.UPDATE, db_obj)
        return db_obj

    # ---------------- DELETE ----------------
    async def remove(self, db: AsyncSession, db_obj: ModelType) -> None:
        await db.delete(db_obj)
        await db.commit()
        logger.info(f"Deleted {self.table} row {self._pk(db_obj)}")
        await self._announce(ChangeType.DELETE, db_obj)


restaurants = CRUDBase(Restaurant)
profiles = CRUDBase(Profile, id_field="user_id")
categories = CRUDBase(MenuCategory)
menu_items = CRUDBase(MenuItem)
tables = CRUDBase(RestaurantTable)
orders = CRUDBase(Order)
order_items = CRUDBase(OrderItem)


async def next_order_number(db: AsyncSession, restaurant_id: str) -> str:
    """Restaurant's order count plus one, zero padded ("0001")."""
    count = await orders.count(db, {"restaurant_id": restaurant_id})
    return f"{count + 1:04d}"
