"""HTTP response bodies."""

from datetime import datetime

from pydantic import BaseModel


class DeployResponse(BaseModel):
    """Completed deployment or skipped push."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Request rejected before deployment (400/401/404/429)."""

    error: str


class DeploymentErrorResponse(BaseModel):
    """Deployment could not run or failed."""

    success: bool = False
    error: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    projects: list[str]
    timestamp: datetime
