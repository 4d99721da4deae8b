"""Health check endpoints."""

from fastapi import APIRouter

from schemas import HealthResponse

SERVICE_NAME = "camp-certificate-preview"

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", service=SERVICE_NAME)
