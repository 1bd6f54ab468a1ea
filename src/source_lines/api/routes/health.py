from fastapi import APIRouter, Depends, Response, status

from source_lines.api.dependencies import get_store
from source_lines.api.schemas import HealthResponse, ReadinessResponse
from source_lines.core.ports.store import SourceStore

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
@router.get("/healthz/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    return HealthResponse()


@router.get("/healthz/ready", response_model=ReadinessResponse)
async def readiness(response: Response, store: SourceStore = Depends(get_store)) -> ReadinessResponse:
    """Ready once the source store answers a ping."""
    if not await store.ping():
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="degraded", store="down")
    return ReadinessResponse(status="ok", store="up")
