"""
System API endpoints.
"""

from ninja import Router
from pydantic import BaseModel, Field

from search_stores import BackendRegistry

router = Router()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service health status")
    backend: str | None = Field(None, description="Default search store backend")
    available_backends: list[str] = Field(default_factory=list)


@router.get("/health", response=HealthResponse, tags=["system"])
def health_check(request):
    """Health check endpoint for load balancers."""
    return HealthResponse(
        status="ok",
        backend=BackendRegistry.get_default(),
        available_backends=BackendRegistry.list_backends(),
    )
