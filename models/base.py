import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request
from sqlalchemy import MetaData
from sqlalchemy.orm import declarative_base
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from settings.config import Settings

# Alembic-friendly naming convention to ensure stable constraint names
naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=naming_convention)
Base = declarative_base(metadata=metadata)

logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def make_engine(settings: Settings, url: Optional[str] = None) -> AsyncEngine:
    """
    Create the SQLAlchemy ASYNC engine (psycopg3 in production, aiosqlite in tests).
    Called once at process start; the engine is never a module-level global.
    """
    engine = create_async_engine(
        url or settings.build_database_url(),
        pool_pre_ping=True,  # Validate connections before use
        future=True,
    )
    logger.info("SQLAlchemy async engine created")
    return engine


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """
    Session factory handed to every repository. Objects stay readable after commit.
    """
    return async_sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    # Import models so their tables are registered on the metadata
    import models.invoice  # noqa: F401
    import models.purchase_order  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def get_session_factory(request: Request) -> async_sessionmaker:
    """
    FastAPI dependency returning the store handle built in `create_app`.
    """
    return request.app.state.session_factory

