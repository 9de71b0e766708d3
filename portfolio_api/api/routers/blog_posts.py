"""Blog post endpoints."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Body, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from ..deps import DBSession
from ...services.resources import blog_posts

router = APIRouter(prefix="/api", tags=["blog"])
logger = structlog.get_logger(__name__)


@router.post("/blog-posts", status_code=201)
def create_blog_post(session: DBSession, body: Any = Body(default=None)):
    """Publish a blog post."""

    try:
        post = blog_posts.create(session, body)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("blog_post_save_failed")
        raise HTTPException(status_code=500, detail="Failed to create blog post.")
    return blog_posts.to_dict(post)


@router.get("/blog-posts")
def list_blog_posts(session: DBSession):
    """List blog posts, newest first."""

    try:
        records = blog_posts.list_all(session)
    except SQLAlchemyError:
        logger.exception("blog_post_list_failed")
        raise HTTPException(status_code=500, detail="Failed to fetch blog posts.")
    return [blog_posts.to_dict(record) for record in records]


__all__ = ["router"]
