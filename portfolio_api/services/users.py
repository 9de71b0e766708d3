"""Local user directory keyed by identity-provider account."""

from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..core.time import isoformat
from ..models import User
from .identity import NormalizedProfile

logger = structlog.get_logger(__name__)


def find_user(session: Session, provider: str, provider_id: str) -> Optional[User]:
    statement = select(User).where(
        User.provider == provider, User.provider_id == provider_id
    )
    return session.exec(statement).first()


def get_user(session: Session, user_id: Any) -> Optional[User]:
    """Load a user by primary key; malformed ids resolve to ``None``."""

    try:
        key = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
    except ValueError:
        return None
    return session.get(User, key)


def resolve_or_create(session: Session, profile: NormalizedProfile) -> User:
    """Return the user for the profile's provider identity, creating it once.

    Existing records are returned as stored; later logins never refresh the
    profile fields. When a concurrent first login inserts the same identity,
    the unique constraint rejects our insert and the winner's row is returned.
    """

    provider = profile.provider.value
    user = find_user(session, provider, profile.provider_id)
    if user:
        return user

    user = User(
        provider=provider,
        provider_id=profile.provider_id,
        name=profile.name,
        email=profile.email,
        avatar_url=profile.avatar_url,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.info("user_insert_conflict", provider=provider)
        existing = find_user(session, provider, profile.provider_id)
        if existing is None:
            raise
        return existing

    session.refresh(user)
    logger.info("user_created", user_id=str(user.id), provider=provider)
    return user


def user_to_dict(user: User) -> Dict[str, Any]:
    """Serialise a user for API responses."""

    return {
        "id": str(user.id),
        "provider": user.provider,
        "provider_id": user.provider_id,
        "name": user.name,
        "email": user.email,
        "avatar_url": user.avatar_url,
        "created_at": isoformat(user.created_at),
    }


__all__ = ["find_user", "get_user", "resolve_or_create", "user_to_dict"]
