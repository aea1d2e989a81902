"""FastAPI application entry point."""

import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from webhook_deployer import __version__
from webhook_deployer.api.middleware import RequestLoggingMiddleware
from webhook_deployer.api.router import router
from webhook_deployer.config import Settings, get_settings
from webhook_deployer.core.exceptions import (
    ClientError,
    ConfigurationInvalidError,
    RateLimitExceededError,
    WebhookDeployerError,
)
from webhook_deployer.core.lock import DeploymentLock
from webhook_deployer.core.pipeline import DeploymentPipeline
from webhook_deployer.core.projects import ProjectRegistry
from webhook_deployer.core.rate_limit import RateLimiter
from webhook_deployer.core.runner import CommandRunner, ShellCommandRunner
from webhook_deployer.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    configure_logging(app.state.settings)
    logger.info(
        "application.starting",
        version=__version__,
        projects=app.state.registry.names(),
    )

    yield

    # Shutdown
    logger.info("application.shutdown")


def create_app(
    settings: Settings | None = None,
    runner: CommandRunner | None = None,
    registry: ProjectRegistry | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Raises:
        ConfigurationInvalidError: DEPLOY_PROJECTS cannot be parsed
    """
    settings = settings or get_settings()
    if registry is None:
        registry = ProjectRegistry.from_json(settings.deploy_projects)

    app = FastAPI(
        title="Webhook Deployer",
        description="Deploys configured projects when their repository receives a push",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.registry = registry
    app.state.pipeline = DeploymentPipeline(
        runner or ShellCommandRunner(timeout_seconds=settings.command_timeout_seconds),
        DeploymentLock(),
    )
    app.state.rate_limiter = RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )

    app.add_middleware(RequestLoggingMiddleware)

    # Register exception handlers
    @app.exception_handler(WebhookDeployerError)
    async def webhook_deployer_error_handler(
        request: Request, exc: WebhookDeployerError
    ) -> JSONResponse:
        """Render application errors with their status code."""
        if not isinstance(exc, ClientError):
            logger.error(
                "deploy.error",
                error=exc.message,
                code=type(exc).__name__,
                details=exc.details,
                path=request.url.path,
            )
        headers = None
        if isinstance(exc, RateLimitExceededError):
            headers = {"Retry-After": str(max(1, int(exc.retry_after)))}
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response(),
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected errors."""
        logger.error(
            "unhandled_exception",
            error=str(exc),
            path=request.url.path,
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Internal server error"},
        )

    app.include_router(router)

    return app


def main() -> None:
    """Run the server with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    try:
        app = create_app(settings)
    except ConfigurationInvalidError as e:
        logger.error("application.config_invalid", error=e.message)
        sys.exit(1)

    logger.info(
        "application.listening",
        host=settings.api_host,
        port=settings.port,
        projects=app.state.registry.names(),
    )
    uvicorn.run(app, host=settings.api_host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
