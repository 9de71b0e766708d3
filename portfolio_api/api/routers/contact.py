"""Contact form endpoints."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Body, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from ..deps import DBSession
from ...services.resources import messages

router = APIRouter(prefix="/api", tags=["contact"])
logger = structlog.get_logger(__name__)


@router.post("/contact")
def send_message(session: DBSession, body: Any = Body(default=None)):
    """Store a contact-form submission."""

    try:
        record = messages.create(session, body)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("message_save_failed")
        raise HTTPException(status_code=500, detail="Failed to send message.")

    logger.info("message_received", message_id=record.id)
    return {"message": "Message sent successfully!"}


@router.get("/messages")
def list_messages(session: DBSession):
    """List contact-form submissions, newest first."""

    try:
        records = messages.list_all(session)
    except SQLAlchemyError:
        logger.exception("message_list_failed")
        raise HTTPException(status_code=500, detail="Failed to fetch messages.")
    return [messages.to_dict(record) for record in records]


__all__ = ["router"]
