"""Database model for showcased projects."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class Project(SQLModel, table=True):
    id: Optional[int] = ORMField(default=None, primary_key=True)
    title: str
    description: str
    link: Optional[str] = None
    created_at: datetime = ORMField(default_factory=utcnow, index=True)


__all__ = ["Project"]
