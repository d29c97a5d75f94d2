from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


DEFAULT_DURATION_SEC = 180
DEFAULT_BLOCK_SIZE_SEC = 5

# Ordinal practice scale: 0 = untouched ... 3 = fully practiced.
LEVEL_MIN = 0
LEVEL_MAX = 3

# Upper bound accepted from clients; one level per block is kept in memory.
MAX_DURATION_SEC = 24 * 60 * 60


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class Video(SQLModel, table=True):
    # Assigned once, never reused (unlike an integer rowid after a delete).
    id: str = Field(default_factory=new_id, primary_key=True)

    provider: str = Field(default="youtube", nullable=False)

    # Provider-scoped id, e.g. the 11 character YouTube id (unique)
    video_id: str = Field(index=True, unique=True, nullable=False)

    url: str = Field(nullable=False)
    title: str = Field(index=True, nullable=False)
    duration_sec: int = Field(default=DEFAULT_DURATION_SEC, nullable=False)
    thumbnail_url: str = Field(nullable=False)

    instrument: Optional[str] = Field(default=None)
    note: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Track(SQLModel, table=True):
    # One track per video, keyed by the external id.
    video_id: str = Field(primary_key=True)

    block_size_sec: int = Field(default=DEFAULT_BLOCK_SIZE_SEC, nullable=False)

    # levels[i] covers [i * block_size_sec, (i + 1) * block_size_sec)
    levels: list[int] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
