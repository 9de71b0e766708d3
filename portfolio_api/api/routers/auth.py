"""OAuth login and bearer-token identity routes."""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import structlog
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from ..deps import CurrentUser, DBSession, IdentityAdapter
from ...core import AUTH_FAILURE_REDIRECT, FRONTEND_ORIGIN
from ...core.security import issue_token
from ...services.identity import IdentityProviderError
from ...services.users import resolve_or_create, user_to_dict

router = APIRouter(prefix="/auth", tags=["auth"])
logger = structlog.get_logger(__name__)


def _login_failed() -> RedirectResponse:
    return RedirectResponse(AUTH_FAILURE_REDIRECT, status_code=302)


def _with_token(url: str, token: str) -> str:
    """Add ``token`` to the query string of ``url``, keeping what is there."""

    parts = urlsplit(url)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key != "token"
    ]
    query.append(("token", token))
    return urlunsplit(parts._replace(query=urlencode(query)))


# Declared before the provider routes so "me" is never taken for a provider.
@router.get("/me")
def me(user: CurrentUser):
    """Return the caller identified by the bearer token."""

    return user_to_dict(user)


@router.get("/{provider}")
async def auth_start(provider: str, request: Request, adapter: IdentityAdapter):
    if not adapter.is_enabled(provider):
        raise HTTPException(status_code=404, detail="Unknown identity provider.")
    try:
        return await adapter.authorize_redirect(request, provider)
    except IdentityProviderError as exc:
        logger.warning("login_start_failed", provider=provider, reason=str(exc))
        return _login_failed()


@router.get("/{provider}/callback")
async def auth_callback(
    provider: str, request: Request, adapter: IdentityAdapter, session: DBSession
):
    if not adapter.is_enabled(provider):
        return _login_failed()

    try:
        profile = await adapter.fetch_profile(request, provider)
    except IdentityProviderError as exc:
        logger.warning("login_failed", provider=provider, reason=str(exc))
        return _login_failed()

    try:
        user = resolve_or_create(session, profile)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("login_user_resolution_failed", provider=provider)
        return _login_failed()

    token = issue_token(user.id)
    logger.info("login_succeeded", provider=provider, user_id=str(user.id))
    return RedirectResponse(_with_token(FRONTEND_ORIGIN, token), status_code=302)


__all__ = ["router"]
