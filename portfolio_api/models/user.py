"""Database model for accounts backed by an external identity provider."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class IdentityProvider(str, Enum):
    GOOGLE = "google"
    GITHUB = "github"


class User(SQLModel, table=True):
    """Visitor identified by the (provider, provider_id) pair."""

    __tablename__ = "user_account"
    __table_args__ = (
        UniqueConstraint("provider", "provider_id", name="uq_user_provider_identity"),
    )

    id: uuid.UUID = ORMField(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    provider: str = ORMField(index=True)
    provider_id: str
    name: str
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["IdentityProvider", "User"]
