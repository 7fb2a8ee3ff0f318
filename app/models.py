"""SQLAlchemy ORM models for the URL shortener application.

The ``urls`` table is the persistent record store. The URL API reads and writes it;
the code-generation service only ever reads the ``short_code`` column to build its
uniqueness snapshot.

Data Model Layout
=================
::
    urls table
    ├─ id (SERIAL PRIMARY KEY)
    ├─ short_code (VARCHAR(32) UNIQUE, INDEXED)
    ├─ original_url (TEXT NOT NULL)
    ├─ clicks (INTEGER DEFAULT 0)
    └─ created_at (TIMESTAMPTZ, DEFAULT NOW())

How to Use
===========
**Create a record**::
    url = URL(short_code="aZ3k9Qp", original_url="https://example.com")
    db.add(url)
    await db.commit()

**Collect every issued code (snapshot)**::
    result = await db.execute(select(URL.short_code))
    codes = set(result.scalars().all())

Key Behaviours
===============
- short_code is unique and indexed for redirect lookups.
- created_at is managed by PostgreSQL.
- clicks starts at 0 and is bumped by the redirect path and the hit notifier.

Classes:
    URL:  A short code mapped to its target URL with a hit counter.
"""

import datetime

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

__all__ = ["URL"]


class URL(Base):
    __tablename__ = "urls"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    short_code: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    original_url: Mapped[str] = mapped_column(Text, nullable=False)
    clicks: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<URL(short_code='{self.short_code}', clicks={self.clicks})>"
