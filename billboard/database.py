"""Database Connection and Session Management"""

import re
import ssl
from typing import AsyncGenerator, Dict, Tuple

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from billboard.config import settings

_SSLMODE = re.compile(r"([?&])sslmode=([^&]+)&?", re.I)


def async_database_url(url: str) -> Tuple[str, Dict]:
    """
    Convert a libpq-style URL for asyncpg.

    asyncpg takes ssl=SSLContext instead of sslmode, so sslmode is removed
    from the URL and, when it asks for encryption, turned into connect_args.
    Alembic's env uses the same conversion.
    """
    url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    connect_args: Dict = {}

    match = _SSLMODE.search(url)
    if match is None:
        return url, connect_args

    if match.group(2).lower() in ("require", "required", "verify-full"):
        # Encrypts without verifying the server certificate
        ssl_ctx = ssl.create_default_context()
        ssl_ctx.check_hostname = False
        ssl_ctx.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ssl_ctx
    url = _SSLMODE.sub(r"\1", url).rstrip("?&")
    return url, connect_args


database_url, connect_args = async_database_url(settings.DATABASE_URL)

# Pool timeout bounds how long a request waits for a connection
engine = create_async_engine(
    database_url,
    connect_args=connect_args,
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_timeout=settings.DB_POOL_TIMEOUT,
    pool_recycle=settings.DB_POOL_RECYCLE,
    echo=settings.DEBUG and settings.LOG_LEVEL.upper() == "DEBUG",
    future=True,
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for declarative models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function to get database session.

    Services commit their own unit of work; the commit here only flushes
    anything an endpoint changed after the service returned.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except BaseException:
            # Also covers request cancellation
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """Initialize database tables (for development only)"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections"""
    await engine.dispose()
