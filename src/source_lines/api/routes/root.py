from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from source_lines import __version__

router = APIRouter()


@router.get("/")
async def root() -> dict[str, Any]:
    """Root discovery endpoint."""
    return {
        "meta": {
            "title": "Source Lines API",
            "description": "Source code lines with SCM blame and coverage metadata.",
            "version": __version__,
        },
        "links": {
            "self": "/",
            "lines": "/api/sources/lines",
            "health": "/health",
            "openapi": "/openapi.json",
            "docs": "/docs",
        },
    }
