import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from common.exceptions import PersistenceError
from common.pagination import PaginationParams, paginate_select

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


def contains_pattern(term: str) -> str:
    """
    ILIKE pattern matching `term` anywhere. `%` and `_` in user input are
    taken literally; use with `escape="\\"`.
    """
    escaped = term.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class BaseRepository(Generic[ModelT]):
    """
    Thin data-access layer over one table.

    Every public call opens its own session and performs a single round trip;
    there are no transactions spanning calls. Driver errors are wrapped in
    PersistenceError so callers never see SQLAlchemy exceptions.
    """

    model: Type[ModelT]
    entity_label: str = "registro"

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    def _error(self, action: str, exc: SQLAlchemyError) -> PersistenceError:
        code = "integrity" if isinstance(exc, IntegrityError) else getattr(exc, "code", None)
        logger.error("Store error while trying to %s %s: %s", action, self.entity_label, exc)
        return PersistenceError(f"Error al {action} {self.entity_label}", code=code)

    async def _scalars(self, stmt, action: str = "obtener") -> List[ModelT]:
        try:
            async with self._session_factory() as db:
                res = await db.execute(stmt)
                return list(res.scalars().all())
        except SQLAlchemyError as exc:
            raise self._error(action, exc) from exc

    async def _scalar(self, stmt, action: str = "obtener") -> Any:
        try:
            async with self._session_factory() as db:
                res = await db.execute(stmt)
                return res.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise self._error(action, exc) from exc

    async def insert(self, values: Dict[str, Any]) -> ModelT:
        try:
            async with self._session_factory() as db:
                record = self.model(**values)
                db.add(record)
                await db.commit()
                await db.refresh(record)
                return record
        except SQLAlchemyError as exc:
            raise self._error("crear", exc) from exc

    async def update(self, record_id: str, changes: Dict[str, Any]) -> Optional[ModelT]:
        try:
            async with self._session_factory() as db:
                record = await db.get(self.model, record_id)
                if record is None:
                    return None
                for key, value in changes.items():
                    setattr(record, key, value)
                await db.commit()
                await db.refresh(record)
                return record
        except SQLAlchemyError as exc:
            raise self._error("actualizar", exc) from exc

    async def delete(self, record_id: str) -> bool:
        try:
            async with self._session_factory() as db:
                record = await db.get(self.model, record_id)
                if record is None:
                    return False
                await db.delete(record)
                await db.commit()
                return True
        except SQLAlchemyError as exc:
            raise self._error("eliminar", exc) from exc

    async def get_by_id(self, record_id: str) -> Optional[ModelT]:
        try:
            async with self._session_factory() as db:
                return await db.get(self.model, record_id)
        except SQLAlchemyError as exc:
            raise self._error("obtener", exc) from exc

    async def get_all(self) -> List[ModelT]:
        """Newest-created first."""
        stmt = select(self.model).order_by(self.model.creado_en.desc(), self.model.id)
        return await self._scalars(stmt)

    async def count_where(self, *criteria) -> int:
        stmt = select(func.count()).select_from(self.model)
        if criteria:
            stmt = stmt.where(*criteria)
        return int(await self._scalar(stmt, "contar") or 0)

    async def paginate(self, stmt, params: PaginationParams):
        try:
            async with self._session_factory() as db:
                return await paginate_select(db, stmt, params)
        except SQLAlchemyError as exc:
            raise self._error("obtener", exc) from exc
