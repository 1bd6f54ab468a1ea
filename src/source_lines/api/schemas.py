from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"


class ReadinessResponse(BaseModel):
    """``store`` is ``down`` when the source store cannot be reached."""

    status: Literal["ok", "degraded"]
    store: Literal["up", "down"]
