"""Request dependencies shared by the routers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlmodel import Session

from ..core import get_session
from ..core.security import InvalidTokenError, verify_token
from ..models import User
from ..services.exceptions import AuthenticationError, NotFoundError
from ..services.identity import IdentityProviderAdapter
from ..services.users import get_user

DBSession = Annotated[Session, Depends(get_session)]


def get_identity_adapter(request: Request) -> IdentityProviderAdapter:
    return request.app.state.identity


def bearer_token(request: Request) -> str:
    """Extract the token from ``Authorization: Bearer <token>``."""

    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("no_token", "No token")
    return token


def get_current_user(session: DBSession, token: str = Depends(bearer_token)) -> User:
    try:
        user_id = verify_token(token)
    except InvalidTokenError as exc:
        raise AuthenticationError("invalid_token", "Invalid token") from exc

    user = get_user(session, user_id)
    if user is None:
        raise NotFoundError("user_not_found", "User not found")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
IdentityAdapter = Annotated[IdentityProviderAdapter, Depends(get_identity_adapter)]
