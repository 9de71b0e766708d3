"""FastAPI application factory and configuration."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from sqlmodel import SQLModel
from starlette.middleware.sessions import SessionMiddleware

from . import models  # noqa: F401 - ensure models are registered with SQLModel
from .api import register_routes
from .api.errors import install_error_handlers
from .core import (
    ALLOWED_CORS_ORIGINS,
    COOKIE_SECURE,
    DB_RESET,
    SECRET_KEY,
    engine,
)
from .core.logging import configure_logging
from .middleware import (
    BodySizeLimitMiddleware,
    RequestIdMiddleware,
    SecurityHeadersMiddleware,
)
from .services.identity import IdentityProviderAdapter, build_provider_configs

configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if DB_RESET:
        SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    logger.info("startup_complete", providers=app.state.identity.providers)
    yield


def create_app(identity: Optional[IdentityProviderAdapter] = None) -> FastAPI:
    app = FastAPI(title="Portfolio API", version="0.3.0", lifespan=lifespan)
    app.state.identity = identity or IdentityProviderAdapter(build_provider_configs())

    # Starlette runs the last added middleware first (outermost).
    # The signed cookie only carries the OAuth state across the provider
    # redirect; authentication itself is stateless.
    app.add_middleware(
        SessionMiddleware,
        secret_key=SECRET_KEY,
        session_cookie="oauth_state",
        max_age=600,
        https_only=COOKIE_SECURE,
        same_site="lax",
    )
    app.add_middleware(BodySizeLimitMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["*"],
    )
    # Unhandled errors become a 500 inside RequestIdMiddleware, so the
    # security headers are added around it.
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    install_error_handlers(app)
    register_routes(app)
    return app


app = create_app()
