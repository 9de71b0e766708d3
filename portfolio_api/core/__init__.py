"""Core configuration and infrastructure helpers."""

from .config import (
    ALLOWED_CORS_ORIGINS,
    AUTH_FAILURE_REDIRECT,
    CALLBACK_BASE_URL,
    COOKIE_SECURE,
    DB_RESET,
    ENV,
    FRONTEND_ORIGIN,
    GITHUB_CLIENT_ID,
    GITHUB_CLIENT_SECRET,
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
    MAX_BODY_BYTES,
    PORT,
    SECRET_KEY,
)
from .database import engine, get_session
from .time import isoformat, utcnow

__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "AUTH_FAILURE_REDIRECT",
    "CALLBACK_BASE_URL",
    "COOKIE_SECURE",
    "DB_RESET",
    "ENV",
    "FRONTEND_ORIGIN",
    "GITHUB_CLIENT_ID",
    "GITHUB_CLIENT_SECRET",
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "MAX_BODY_BYTES",
    "PORT",
    "SECRET_KEY",
    "engine",
    "get_session",
    "isoformat",
    "utcnow",
]
