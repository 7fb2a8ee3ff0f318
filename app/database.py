"""Database engine and session management shared by the URL API and the codegen service.

Flow Diagram — Database Operations
=================================
::
    ┌─────────────┐
    │  Request /   │
    │  refill cycle│
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ async_session│
    │ ()           │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Query / write│
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Auto-close   │
    │ (finally)    │
    └─────────────┘

How to Use
===========
**Use in FastAPI endpoints**::
    @app.get("/urls")
    async def get_urls(db: AsyncSession = Depends(get_db)):
        ...

**Use outside a request (workers, snapshot reads)**::
    async with async_session() as session:
        ...

Functions:
    get_db():  FastAPI dependency for database sessions.
    init_db():  Creates all tables on startup.
    close_db():  Disposes the engine on shutdown.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import get_settings

__all__ = ["Base", "async_session", "get_db", "init_db", "close_db"]

settings = get_settings()

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
