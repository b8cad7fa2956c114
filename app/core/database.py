from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool

from app.core.config import settings

# Shared by request handlers and the background score recompute
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    poolclass=AsyncAdaptedQueuePool,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_recycle=settings.DB_POOL_RECYCLE_SECONDS,
    pool_pre_ping=True,
    connect_args={
        "server_settings": {"application_name": settings.DB_APPLICATION_NAME}
    },
)

# Sessions keep loaded rows usable after commit; recompute results and
# API responses are built from them once the transaction has ended.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db():
    """Yield one session per request; it is closed when the request ends."""
    async with AsyncSessionLocal() as session:
        yield session
