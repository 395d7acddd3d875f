"""Row store gateway: the only seam between the feed services and the relational store.

Two capabilities are exposed, a filtered/sorted/paginated row fetch and an
existence-set fetch. Everything above this module is storage-agnostic.
"""
import asyncio
import logging
import uuid
from collections.abc import Iterable, Sequence
from typing import Any, Protocol

from sqlalchemy import Uuid, and_, asc, desc, inspect, or_, select
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import DataError, NoSuchColumnError, ProgrammingError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import RelationshipProperty, selectinload

from dishcovery.core.config import settings
from dishcovery.core.exceptions import InvalidQuery, NotFound, StoreError, StoreUnavailable
from dishcovery.db.query import AllOf, AnyOf, AtLeast, Eq, OneOf, Overlaps, Predicate, SortSpec, TextMatch
from dishcovery.models import Comment, Post, PostLike, PostSave, Restaurant, User

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = settings.MAX_PAGE_SIZE

TABLES: dict[str, type] = {
    "users": User,
    "restaurants": Restaurant,
    "posts": Post,
    "post_likes": PostLike,
    "post_saves": PostSave,
    "post_comments": Comment,
}


class RowStoreGateway(Protocol):
    """Capability interface over the relational store."""

    async def fetch_page(
        self,
        table: str,
        select_shape: Sequence[str],
        filter_predicate: Predicate | None,
        sort_spec: SortSpec,
        offset: int,
        limit: int,
    ) -> list[dict[str, Any]]:
        ...

    async def fetch_existence_set(
        self,
        table: str,
        foreign_key_column: str,
        viewer_id: str,
        candidate_ids: Sequence[str],
    ) -> set[str]:
        ...

    async def fetch_one(self, table: str, select_shape: Sequence[str], row_id: str) -> dict[str, Any]:
        ...


def clamp_limit(limit: int) -> int:
    if limit < 1:
        raise InvalidQuery(f"limit must be >= 1, got {limit}")
    return min(limit, MAX_PAGE_SIZE)


def _serialize(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


def _as_uuid(value: Any) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def _bind_value(col, value: Any) -> Any:
    if isinstance(col.type, Uuid) and value is not None:
        key = _as_uuid(value)
        if key is None:
            raise InvalidQuery(f"Not a valid id: {value!r}")
        return key
    return value


def _overlaps(col, values: Sequence[str]):
    if not isinstance(col.type, JSONB):
        raise InvalidQuery(f"Not an array column: {col.key}")
    if not values:
        raise InvalidQuery(f"No values to match in {col.key}")
    return or_(*(col.contains([v]) for v in values))


def row_to_dict(obj: Any, select_shape: Iterable[str] = ()) -> dict[str, Any]:
    """Flatten an ORM row into a dict, embedding the relationships named in select_shape."""
    mapper = inspect(obj).mapper
    row = {attr.key: _serialize(getattr(obj, attr.key)) for attr in mapper.column_attrs}
    for rel in select_shape:
        related = getattr(obj, rel)
        row[rel] = row_to_dict(related) if related is not None else None
    return row


class SqlAlchemyGateway:
    """RowStoreGateway over the async SQLAlchemy ORM.

    Each call opens its own short-lived session so that independent queries
    (e.g. the two existence sets) can run concurrently.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float | None = None,
    ):
        self.session_factory = session_factory
        self.timeout = timeout if timeout is not None else settings.STORE_TIMEOUT_SECONDS

    # -- resolution helpers -------------------------------------------------

    @staticmethod
    def _model(table: str) -> type:
        model = TABLES.get(table)
        if model is None:
            raise InvalidQuery(f"Unknown table: {table}")
        return model

    @staticmethod
    def _column(model: type, name: str):
        attr = getattr(model, name, None)
        if attr is None or name not in inspect(model).column_attrs:
            raise InvalidQuery(f"Unknown column {model.__tablename__}.{name}")
        return attr

    @classmethod
    def _relationship(cls, model: type, name: str):
        rel = inspect(model).relationships.get(name)
        if rel is None or not isinstance(rel, RelationshipProperty):
            raise InvalidQuery(f"Unknown relationship {model.__tablename__}.{name}")
        return getattr(model, name), rel.mapper.class_

    @classmethod
    def _compare(cls, model: type, path: str, build):
        if "." not in path:
            return build(cls._column(model, path))
        rel_name, col_name = path.split(".", 1)
        rel_attr, target = cls._relationship(model, rel_name)
        condition = build(cls._column(target, col_name))
        # one-to-many paths match when any related row satisfies the condition
        return rel_attr.any(condition) if rel_attr.property.uselist else rel_attr.has(condition)

    @classmethod
    def _where(cls, model: type, predicate: Predicate):
        if isinstance(predicate, Eq):
            return cls._compare(model, predicate.column, lambda col: col == _bind_value(col, predicate.value))
        if isinstance(predicate, TextMatch):
            escaped = predicate.term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            pattern = f"%{escaped}%"
            return cls._compare(model, predicate.column, lambda col: col.ilike(pattern, escape="\\"))
        if isinstance(predicate, OneOf):
            return cls._compare(model, predicate.column, lambda col: col.in_([_bind_value(col, v) for v in predicate.values]))
        if isinstance(predicate, Overlaps):
            return cls._compare(model, predicate.column, lambda col: _overlaps(col, predicate.values))
        if isinstance(predicate, AtLeast):
            return cls._compare(model, predicate.column, lambda col: col >= predicate.value)
        if isinstance(predicate, AnyOf):
            return or_(*(cls._where(model, p) for p in predicate.predicates))
        if isinstance(predicate, AllOf):
            return and_(*(cls._where(model, p) for p in predicate.predicates))
        raise InvalidQuery(f"Unsupported predicate: {predicate!r}")

    # -- execution ----------------------------------------------------------

    async def _run(self, work):
        try:
            async with self.session_factory() as session:
                return await asyncio.wait_for(work(session), timeout=self.timeout)
        except StoreError:
            raise
        except asyncio.TimeoutError as e:
            logger.warning("Row store call timed out after %ss", self.timeout)
            raise StoreUnavailable("Row store timed out") from e
        except (ProgrammingError, DataError, NoSuchColumnError) as e:
            logger.warning("Row store rejected query: %s", e)
            raise InvalidQuery(str(e.orig) if getattr(e, "orig", None) else str(e)) from e
        except (SQLAlchemyError, OSError) as e:
            logger.error("Row store unavailable: %s", e)
            raise StoreUnavailable("Row store unavailable") from e

    async def fetch_page(
        self,
        table: str,
        select_shape: Sequence[str],
        filter_predicate: Predicate | None,
        sort_spec: SortSpec,
        offset: int,
        limit: int,
    ) -> list[dict[str, Any]]:
        model = self._model(table)
        if offset < 0:
            raise InvalidQuery(f"offset must be >= 0, got {offset}")
        limit = clamp_limit(limit)

        q = select(model)
        for rel in select_shape:
            rel_attr, _ = self._relationship(model, rel)
            q = q.options(selectinload(rel_attr))
        if filter_predicate is not None:
            q = q.where(self._where(model, filter_predicate))
        for key in sort_spec:
            col = self._column(model, key.column)
            q = q.order_by(desc(col).nulls_last() if key.descending else asc(col).nulls_last())
        q = q.offset(offset).limit(limit)

        async def work(session: AsyncSession):
            result = await session.execute(q)
            return [row_to_dict(obj, select_shape) for obj in result.scalars().all()]

        rows = await self._run(work)
        logger.debug("fetch_page %s offset=%d limit=%d -> %d rows", table, offset, limit, len(rows))
        return rows

    async def fetch_existence_set(
        self,
        table: str,
        foreign_key_column: str,
        viewer_id: str,
        candidate_ids: Sequence[str],
    ) -> set[str]:
        model = self._model(table)
        fk_col = self._column(model, foreign_key_column)
        viewer_col = self._column(model, "user_id")
        viewer = _as_uuid(viewer_id)
        candidates = [u for u in (_as_uuid(c) for c in candidate_ids) if u is not None]
        if viewer is None or not candidates:
            return set()

        q = select(fk_col).where(viewer_col == viewer, fk_col.in_(candidates))

        async def work(session: AsyncSession):
            result = await session.execute(q)
            return {str(row[0]) for row in result.all() if row[0]}

        return await self._run(work)

    async def fetch_one(self, table: str, select_shape: Sequence[str], row_id: str) -> dict[str, Any]:
        model = self._model(table)
        key = _as_uuid(row_id)
        if key is None:
            raise NotFound(f"{table} {row_id} not found")
        q = select(model).where(self._column(model, "id") == key)
        for rel in select_shape:
            rel_attr, _ = self._relationship(model, rel)
            q = q.options(selectinload(rel_attr))

        async def work(session: AsyncSession):
            result = await session.execute(q)
            obj = result.scalar_one_or_none()
            return row_to_dict(obj, select_shape) if obj is not None else None

        row = await self._run(work)
        if row is None:
            raise NotFound(f"{table} {row_id} not found")
        return row
