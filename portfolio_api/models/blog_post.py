"""Database model for blog posts."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class BlogPost(SQLModel, table=True):
    """Blog entry rendered on the portfolio site."""

    __tablename__ = "blog_post"

    id: Optional[int] = ORMField(default=None, primary_key=True)
    title: str
    content: str
    created_at: datetime = ORMField(default_factory=utcnow, index=True)


__all__ = ["BlogPost"]
