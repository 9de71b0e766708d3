"""System-level API endpoints."""

from __future__ import annotations

from typing import Dict

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["system"])


@router.get("/health")
def health() -> Dict[str, str]:
    """Simple readiness probe."""

    return {"status": "ok"}


@router.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "Backend API is running!"


__all__ = ["router"]
