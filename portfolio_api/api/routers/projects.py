"""Portfolio project endpoints."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Body, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from ..deps import DBSession
from ...services.resources import projects

router = APIRouter(prefix="/api", tags=["projects"])
logger = structlog.get_logger(__name__)


@router.post("/projects", status_code=201)
def create_project(session: DBSession, body: Any = Body(default=None)):
    try:
        project = projects.create(session, body)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("project_save_failed")
        raise HTTPException(status_code=500, detail="Failed to create project.")
    return projects.to_dict(project)


@router.get("/projects")
def list_projects(session: DBSession):
    try:
        records = projects.list_all(session)
    except SQLAlchemyError:
        logger.exception("project_list_failed")
        raise HTTPException(status_code=500, detail="Failed to fetch projects.")
    return [projects.to_dict(record) for record in records]


__all__ = ["router"]
