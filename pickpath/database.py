import json
from contextlib import asynccontextmanager
from decimal import Decimal
from datetime import datetime, date
from typing import AsyncGenerator
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from psycopg.types.json import set_json_dumps

from pickpath.config import settings


# Custom JSON encoder that handles Decimal, datetime, UUID, etc.
class CustomJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal, datetime, UUID and other types."""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, UUID):
            return str(obj)
        return super().default(obj)


def custom_json_dumps(obj):
    """Custom JSON dumps function for psycopg and SQLAlchemy JSON columns."""
    return json.dumps(obj, cls=CustomJSONEncoder)


# Configure psycopg to use our custom JSON encoder globally
set_json_dumps(custom_json_dumps)


def normalize_database_url(url: str) -> str:
    """Switch plain/asyncpg PostgreSQL URLs to the async psycopg driver."""
    if url.startswith("postgresql+asyncpg://"):
        return url.replace("postgresql+asyncpg://", "postgresql+psycopg://")
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://")
    return url


def build_engine(url: str, echo: bool = False):
    """Create an async engine with settings appropriate for the backend."""
    url = normalize_database_url(url)

    # SQLite doesn't support pool settings
    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=echo,
            json_serializer=custom_json_dumps,
            connect_args={"check_same_thread": False},
        )

    return create_async_engine(
        url,
        echo=echo,
        json_serializer=custom_json_dumps,
        pool_pre_ping=True,  # Check connection health before use
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        connect_args={
            "prepare_threshold": None,  # Disable prepared statements for poolers
            "connect_timeout": 30,
        },
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Create async session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session, committing on success."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def get_db_session():
    """Context manager for getting database session (for scripts and jobs)."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(bind=None) -> None:
    """Create all tables on the given engine (defaults to the app engine)."""
    # Import all models to register them with Base.metadata
    from pickpath import models  # noqa: F401

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
