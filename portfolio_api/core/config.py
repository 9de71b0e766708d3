"""Application settings and environment helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List

from dotenv import load_dotenv

load_dotenv(override=False)


def _require_env(name: str) -> str:
    """Return a required environment variable or raise an error."""

    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc


def _split_csv(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


# Runtime --------------------------------------------------------------------
ENV = os.getenv("ENV", "local")
PORT = _env_int("PORT", 5000)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


# Storage --------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parents[2]
DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{PROJECT_ROOT / 'data' / 'app.db'}"
DB_RESET = _env_bool("DB_RESET", False)


# Cross-origin access --------------------------------------------------------
# ALLOWED_ORIGIN may hold a comma-separated list for multi-domain deploys.
ALLOWED_CORS_ORIGINS = _unique(
    _split_csv(os.getenv("ALLOWED_ORIGIN")) or ["https://web-bridge-lac.vercel.app"]
)
FRONTEND_ORIGIN = (os.getenv("FRONTEND_ORIGIN") or ALLOWED_CORS_ORIGINS[0]).rstrip("/")
AUTH_FAILURE_REDIRECT = os.getenv("AUTH_FAILURE_REDIRECT", "/")


# Application security -------------------------------------------------------
SECRET_KEY = _require_env("SECRET_KEY")
JWT_SECRET = os.getenv("JWT_SECRET") or SECRET_KEY
JWT_ALGORITHM = "HS256"
TOKEN_TTL_DAYS = 7

COOKIE_SECURE = _env_bool("COOKIE_SECURE", False)
MAX_BODY_BYTES = 1024 * 1024


# Identity providers ---------------------------------------------------------
CALLBACK_BASE_URL = os.getenv("CALLBACK_BASE_URL", f"http://localhost:{PORT}").rstrip("/")

GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID") or None
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET") or None
GITHUB_CLIENT_ID = os.getenv("GITHUB_CLIENT_ID") or None
GITHUB_CLIENT_SECRET = os.getenv("GITHUB_CLIENT_SECRET") or None


__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "AUTH_FAILURE_REDIRECT",
    "CALLBACK_BASE_URL",
    "COOKIE_SECURE",
    "DATABASE_URL",
    "DB_RESET",
    "ENV",
    "FRONTEND_ORIGIN",
    "GITHUB_CLIENT_ID",
    "GITHUB_CLIENT_SECRET",
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "JWT_ALGORITHM",
    "JWT_SECRET",
    "LOG_LEVEL",
    "MAX_BODY_BYTES",
    "PORT",
    "PROJECT_ROOT",
    "SECRET_KEY",
    "TOKEN_TTL_DAYS",
]
