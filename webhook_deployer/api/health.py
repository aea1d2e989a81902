"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

from webhook_deployer.api.deps import RegistryDep
from webhook_deployer.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(registry: RegistryDep) -> HealthResponse:
    """Report liveness and the configured project names."""
    return HealthResponse(
        status="ok",
        projects=registry.names(),
        timestamp=datetime.now(timezone.utc),
    )
