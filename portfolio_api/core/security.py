"""Bearer token issuing and verification."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict

import jwt
from jwt import PyJWTError
from jwt.utils import base64url_decode, base64url_encode

from .config import JWT_ALGORITHM, JWT_SECRET, TOKEN_TTL_DAYS
from .time import utcnow

TOKEN_TTL = timedelta(days=TOKEN_TTL_DAYS)


class InvalidTokenError(Exception):
    """Raised for every token that must not be trusted.

    Malformed, tampered, wrongly signed and expired tokens all raise this
    same error with the same message.
    """

    def __init__(self) -> None:
        super().__init__("invalid token")


def issue_token(user_id: Any, issued_at: datetime | None = None) -> str:
    """Mint a signed token for ``user_id`` that expires after seven days."""

    issued = int((issued_at or utcnow()).timestamp())
    payload = {
        "sub": str(user_id),
        "iat": issued,
        "exp": issued + int(TOKEN_TTL.total_seconds()),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def _is_canonical(token: str) -> bool:
    # Base64 decoding drops stray characters and trailing bits; only
    # segments that re-encode to themselves are accepted.
    segments = token.split(".")
    if len(segments) != 3:
        return False
    for segment in segments:
        try:
            raw = base64url_decode(segment.encode("ascii"))
        except ValueError:
            return False
        if base64url_encode(raw).decode("ascii") != segment:
            return False
    return True


def verify_token(token: str, now: datetime | None = None) -> str:
    """Return the user id bound to ``token`` or raise :class:`InvalidTokenError`."""

    if not isinstance(token, str) or not _is_canonical(token):
        raise InvalidTokenError()

    try:
        payload: Dict[str, Any] = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["sub", "exp", "iat"], "verify_exp": False},
        )
    except PyJWTError as exc:
        raise InvalidTokenError() from exc

    expires = payload.get("exp")
    subject = payload.get("sub")
    if not isinstance(expires, int) or not isinstance(subject, str) or not subject:
        raise InvalidTokenError()

    current = (now or utcnow()).timestamp()
    if current >= expires:
        raise InvalidTokenError()
    return subject


__all__ = ["InvalidTokenError", "TOKEN_TTL", "issue_token", "verify_token"]
