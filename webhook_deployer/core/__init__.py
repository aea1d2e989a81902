"""Core functionality for Webhook Deployer."""

from webhook_deployer.core.exceptions import (
    ClientError,
    CommandFailedError,
    ConfigurationInvalidError,
    DeploymentAlreadyInProgressError,
    DeploymentFailedError,
    ManifestInvalidError,
    PayloadInvalidError,
    ProcessError,
    ProjectDirectoryMissingError,
    ProjectNotFoundError,
    RateLimitExceededError,
    SignatureInvalidError,
    StepError,
    WebhookDeployerError,
)
from webhook_deployer.core.lock import DeploymentLock
from webhook_deployer.core.pipeline import DeploymentPipeline
from webhook_deployer.core.projects import ProjectRegistry
from webhook_deployer.core.rate_limit import RateLimiter
from webhook_deployer.core.runner import CommandRunner, ShellCommandRunner
from webhook_deployer.core.signature import compute_signature, verify_signature

__all__ = [
    "WebhookDeployerError",
    "ClientError",
    "CommandFailedError",
    "ConfigurationInvalidError",
    "DeploymentAlreadyInProgressError",
    "DeploymentFailedError",
    "ManifestInvalidError",
    "PayloadInvalidError",
    "ProcessError",
    "ProjectDirectoryMissingError",
    "ProjectNotFoundError",
    "RateLimitExceededError",
    "SignatureInvalidError",
    "StepError",
    "DeploymentLock",
    "DeploymentPipeline",
    "ProjectRegistry",
    "RateLimiter",
    "CommandRunner",
    "ShellCommandRunner",
    "compute_signature",
    "verify_signature",
]
