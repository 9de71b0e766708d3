"""Aggregate API routers."""

from fastapi import APIRouter

from .auth import router as auth_router
from .blog_posts import router as blog_posts_router
from .contact import router as contact_router
from .projects import router as projects_router
from .system import router as system_router

ALL_ROUTERS: tuple[APIRouter, ...] = (
    system_router,
    contact_router,
    projects_router,
    blog_posts_router,
    auth_router,
)

__all__ = ["ALL_ROUTERS"]
