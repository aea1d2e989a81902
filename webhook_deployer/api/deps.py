"""Dependency injection for API endpoints."""

from typing import Annotated

from fastapi import Depends, Request

from webhook_deployer.config import Settings
from webhook_deployer.core.pipeline import DeploymentPipeline
from webhook_deployer.core.projects import ProjectRegistry
from webhook_deployer.core.rate_limit import RateLimiter


async def get_app_settings(request: Request) -> Settings:
    """Get the settings the app was created with."""
    return request.app.state.settings


async def get_registry(request: Request) -> ProjectRegistry:
    """Get the project registry."""
    return request.app.state.registry


async def get_pipeline(request: Request) -> DeploymentPipeline:
    """Get the deployment pipeline."""
    return request.app.state.pipeline


async def get_rate_limiter(request: Request) -> RateLimiter:
    """Get the deploy endpoint rate limiter."""
    return request.app.state.rate_limiter


def get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def get_client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


# Type aliases for cleaner signatures
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
RegistryDep = Annotated[ProjectRegistry, Depends(get_registry)]
PipelineDep = Annotated[DeploymentPipeline, Depends(get_pipeline)]
RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter)]
RequestIdDep = Annotated[str | None, Depends(get_request_id)]
ClientAddressDep = Annotated[str, Depends(get_client_address)]
