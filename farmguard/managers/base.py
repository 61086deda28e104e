from typing import Any, Union, get_args

import sqlalchemy as db
from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, async_sessionmaker

from farmguard.exceptions.base import GenericSchemaException, DBErrorCode
from farmguard.models.base import BaseSchema, JSONType, utcnow

NESTED_FILTERS = dict[str, Union["NESTED_FILTERS", list[str], str, Any]]


class ListModel(BaseModel):
    items: list[Any]
    count: int

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __len__(self):
        return self.count


class GenericManager[SchemaType: BaseSchema]:
    """
    Async CRUD over a single table.

    Every method either runs in its own session (and commits) or, when a
    ``session`` is passed, joins the caller's unit of work and only flushes,
    leaving commit/rollback to the caller.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            bind=self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    async def init_db(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(BaseSchema.metadata.create_all)

    @property
    def Schema(self) -> type[SchemaType]:
        return get_args(self.__orig_bases__[0])[0]  # noqa

    async def _flush(self, session: AsyncSession):
        try:
            await session.flush()
        except IntegrityError as e:
            raise GenericSchemaException(409, DBErrorCode.DB_INTEGRITY_ERROR, self.Schema, extras=str(e.orig))

    @classmethod
    def _filter(cls, query: db.Select, filters: NESTED_FILTERS, schema: type[BaseSchema]) -> db.Select:
        operator_mapping = {
            '==': lambda col, val: col == val,
            '!=': lambda col, val: col != val,
            '>': lambda col, val: col > val,
            '>=': lambda col, val: col >= val,
            '<': lambda col, val: col < val,
            '<=': lambda col, val: col <= val,
            'in': lambda col, val: col.in_(val if isinstance(val, list) else [val]),
            'between': lambda col, val: col.between(val[0], val[1])
        }

        for column, condition in filters.items():
            col = getattr(schema, column)
            if isinstance(condition, dict):
                for op, value in condition.items():
                    if op in operator_mapping:
                        query = query.filter(operator_mapping[op](col, value))
            elif isinstance(condition, list):
                query = query.filter(col.in_(condition))
            else:
                query = query.filter(col == condition)  # noqa
        return query

    def _sorted(self, query: db.Select, sorts: list[str] = None) -> db.Select:
        for sort in sorts or []:
            asc = not sort.startswith("-")
            col = getattr(self.Schema, sort.lstrip("-").lstrip("+"))
            query = query.order_by(col.asc() if asc else col.desc())
        return query

    async def create(self, data: SchemaType, *, session: AsyncSession = None) -> SchemaType:
        if session:
            session.add(data)
            await self._flush(session)
            return data
        async with self.session_factory() as session:
            record = await GenericManager.create(self, data, session=session)
            await session.commit()
            return record

    async def fetch(self, uid: str, *, session: AsyncSession = None) -> SchemaType:
        if session:
            query = db.select(self.Schema).filter_by(uid=uid)
            record = (await session.execute(query)).scalar_one_or_none()
            if record is None: raise GenericSchemaException(404, DBErrorCode.DB_NOT_FOUND, self.Schema)
            return record
        async with self.session_factory() as session:
            return await GenericManager.fetch(self, uid, session=session)

    async def fetch_all(
            self,
            limit: int = 0,
            offset: int = 0,
            filters: NESTED_FILTERS = None,
            sorts: list[str] = None,
            *,
            session: AsyncSession = None,
    ) -> ListModel:
        if session:
            query = db.select(self.Schema)
            if filters: query = self._filter(query, filters, self.Schema)
            query = self._sorted(query, sorts)
            if limit: query = query.limit(limit)
            if offset: query = query.offset(offset)
            records = list((await session.execute(query)).scalars())
            return ListModel(items=records, count=len(records))
        async with self.session_factory() as session:
            return await GenericManager.fetch_all(self, limit, offset, filters, sorts, session=session)

    async def fetch_one(
            self,
            filters: NESTED_FILTERS = None,
            sorts: list[str] = None,
            *,
            session: AsyncSession = None,
    ) -> SchemaType:
        records = await self.fetch_all(1, 0, filters, sorts, session=session)
        if not records.count: raise GenericSchemaException(404, DBErrorCode.DB_NOT_FOUND, self.Schema)
        return records.items[0]

    async def count(self, filters: NESTED_FILTERS = None, *, session: AsyncSession = None) -> int:
        if session:
            query = db.select(db.func.count()).select_from(self.Schema)
            if filters: query = self._filter(query, filters, self.Schema)
            return (await session.execute(query)).scalar_one()
        async with self.session_factory() as session:
            return await GenericManager.count(self, filters, session=session)

    async def update(self, uid: str, updates: dict, *, session: AsyncSession = None) -> SchemaType:
        if session:
            record = await self.fetch(uid, session=session)
            for col, val in updates.items(): setattr(record, col, val)
            await self._flush(session)
            return record
        async with self.session_factory() as session:
            record = await GenericManager.update(self, uid, updates, session=session)
            await session.commit()
            return record

    async def compare_and_swap(
            self,
            uid: str,
            expected: dict,
            updates: dict,
            *,
            session: AsyncSession = None,
    ) -> bool:
        """Apply ``updates`` only if the row still matches ``expected``; returns whether it did."""
        if session:
            query = db.update(self.Schema).where(self.Schema.uid == uid)
            for col, val in expected.items():
                query = query.where(getattr(self.Schema, col) == val)
            query = query.values(**updates, updated_at=utcnow()).execution_options(synchronize_session=False)
            result = await session.execute(query)
            return result.rowcount == 1
        async with self.session_factory() as session:
            swapped = await GenericManager.compare_and_swap(self, uid, expected, updates, session=session)
            await session.commit()
            return swapped

    async def delete_all(self, filters: NESTED_FILTERS, *, session: AsyncSession = None) -> int:
        if session:
            query = db.delete(self.Schema)
            query = self._filter(query, filters, self.Schema)
            result = await session.execute(query.execution_options(synchronize_session=False))
            return result.rowcount
        async with self.session_factory() as session:
            deleted = await GenericManager.delete_all(self, filters, session=session)
            await session.commit()
            return deleted

    async def delete(self, uid: str, *, session: AsyncSession = None) -> int:
        return await self.delete_all({"uid": uid}, session=session)


__all__ = [
    "BaseSchema", "GenericManager", "ListModel", "JSONType", "utcnow",
]
