"""Database model for contact-form submissions."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class Message(SQLModel, table=True):
    """Message left through the portfolio contact form."""

    id: Optional[int] = ORMField(default=None, primary_key=True)
    name: str
    email: str
    subject: Optional[str] = None
    message: str
    created_at: datetime = ORMField(default_factory=utcnow, index=True)


__all__ = ["Message"]
