"""Database session management."""
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from meetpoll.core.config import settings

DATABASE_URL = settings.get_database_url()

_engine_kwargs = {"pool_pre_ping": True, "echo": False}
if not DATABASE_URL.startswith("sqlite"):
    _engine_kwargs.update(
        pool_size=settings.DB_POOL_SIZE,        # Configurable via DB_POOL_SIZE env var
        max_overflow=settings.DB_MAX_OVERFLOW,  # Configurable via DB_MAX_OVERFLOW env var
    )

engine = create_async_engine(DATABASE_URL, **_engine_kwargs)
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI to get database session."""
    async with SessionLocal() as db:
        yield db
