"""Health check endpoint."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    backend: str


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Return API health status and the active user store backend.

    Used by load balancers and monitoring systems to verify
    the service is running and responsive.
    """
    backend = "database" if request.app.state.use_database else "memory"
    return HealthResponse(status="ok", version=request.app.version, backend=backend)
