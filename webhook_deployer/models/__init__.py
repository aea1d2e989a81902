"""Data models for Webhook Deployer."""

from webhook_deployer.models.deployment import (
    CommandResult,
    DeploymentResult,
    DeploymentStep,
)
from webhook_deployer.models.project import (
    BRANCH_REF_PREFIX,
    DeploymentRequest,
    ProjectConfig,
)
from webhook_deployer.models.responses import (
    DeployResponse,
    DeploymentErrorResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    # Project models
    "BRANCH_REF_PREFIX",
    "DeploymentRequest",
    "ProjectConfig",
    # Deployment models
    "CommandResult",
    "DeploymentResult",
    "DeploymentStep",
    # Response models
    "DeployResponse",
    "DeploymentErrorResponse",
    "ErrorResponse",
    "HealthResponse",
]
