"""Persistent record access for short-code mappings.

Functions:
    URLStore:  Per-session CRUD over the ``urls`` table.
    record_hit():  Session-owning click increment, used as the hit-notifier sink.
"""

from collections.abc import Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import async_session
from app.models import URL

__all__ = ["URLStore", "record_hit"]


class URLStore:
    def __init__(self, db: AsyncSession):
        self._db = db

    async def get(self, short_code: str) -> URL | None:
        result = await self._db.execute(select(URL).where(URL.short_code == short_code))
        return result.scalar_one_or_none()

    async def create(self, short_code: str, original_url: str) -> URL:
        url = URL(short_code=short_code, original_url=original_url, clicks=0)
        self._db.add(url)
        await self._db.commit()
        await self._db.refresh(url)
        return url

    async def rollback(self) -> None:
        await self._db.rollback()

    async def list_all(self) -> Sequence[URL]:
        result = await self._db.execute(select(URL).order_by(URL.created_at.desc()))
        return result.scalars().all()

    async def delete(self, short_code: str) -> bool:
        result = await self._db.execute(delete(URL).where(URL.short_code == short_code))
        await self._db.commit()
        return result.rowcount > 0

    async def increment_clicks(self, short_code: str, delta: int = 1) -> bool:
        assert isinstance(delta, int) and delta > 0, f"delta must be positive int, got {delta!r}"
        result = await self._db.execute(
            update(URL).where(URL.short_code == short_code).values(clicks=URL.clicks + delta)
        )
        await self._db.commit()
        return result.rowcount > 0


async def record_hit(short_code: str) -> None:
    async with async_session() as session:
        await URLStore(session).increment_clicks(short_code)
