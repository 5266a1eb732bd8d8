"""Health check endpoint for monitoring relay status."""

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    active_connections: int


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check(request: Request) -> HealthResponse:
    """
    Report relay status and the number of registered connections.

    The relay has no external dependencies, so a responding process is a
    healthy one.

    Returns:
        HealthResponse: Status and current registry size.
    """
    registry = request.app.state.connection_registry
    return HealthResponse(status="healthy", active_connections=len(registry))
