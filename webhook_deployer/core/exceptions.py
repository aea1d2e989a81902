"""Custom exceptions for Webhook Deployer."""

from typing import Any


class WebhookDeployerError(Exception):
    """Base exception for Webhook Deployer."""

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        """Body returned to the HTTP caller."""
        return {"success": False, "error": self.message}


class ConfigurationInvalidError(WebhookDeployerError):
    """Project configuration could not be loaded. Fatal at startup."""

    pass


class ClientError(WebhookDeployerError):
    """Request rejected before any deployment work started."""

    def to_response(self) -> dict[str, Any]:
        return {"error": self.message}


class ProjectNotFoundError(ClientError):
    """Project not found."""

    status_code = 404

    def __init__(self, project_name: str):
        super().__init__("Project not found", {"project": project_name})
        self.project_name = project_name


class SignatureInvalidError(ClientError):
    """Webhook signature missing or wrong."""

    status_code = 401

    def __init__(self, project_name: str):
        super().__init__("Invalid signature", {"project": project_name})
        self.project_name = project_name


class PayloadInvalidError(ClientError):
    """Signed body is not a usable push payload."""

    status_code = 400

    def __init__(self, reason: str):
        super().__init__("Invalid payload", {"reason": reason})


class RateLimitExceededError(ClientError):
    """Too many deploy requests from one client."""

    status_code = 429

    def __init__(self, client: str, retry_after: float):
        super().__init__(
            "Too many deploy requests from this IP, please try again later.",
            {"client": client, "retry_after": retry_after},
        )
        self.retry_after = retry_after


class DeploymentAlreadyInProgressError(WebhookDeployerError):
    """Another deployment holds the lock."""

    def __init__(self) -> None:
        super().__init__("Another deployment is in progress")


class ProjectDirectoryMissingError(WebhookDeployerError):
    """Configured working directory does not exist."""

    def __init__(self, directory: str):
        super().__init__(
            f"Project directory {directory} does not exist",
            {"dir": directory},
        )
        self.directory = directory


class StepError(WebhookDeployerError):
    """A pipeline step failed."""

    def __init__(self, step: str, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, {"step": step, **(details or {})})
        self.step = step


class ManifestInvalidError(StepError):
    """package.json exists but cannot be read."""

    def __init__(self, step: str, path: str, reason: str):
        super().__init__(step, f"Invalid manifest {path}: {reason}", {"path": path})


class CommandFailedError(StepError):
    """Command exited with a non-zero status."""

    def __init__(self, step: str, command: str, exit_code: int, stderr: str):
        super().__init__(
            step,
            f"Command failed with code {exit_code}: {stderr}",
            {"command": command, "exit_code": exit_code},
        )
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr


class ProcessError(StepError):
    """Command could not be started or was killed."""

    def __init__(self, step: str, command: str, cause: str):
        super().__init__(step, f"Command '{command}' {cause}", {"command": command})
        self.command = command
        self.cause = cause


class DeploymentFailedError(WebhookDeployerError):
    """Pipeline failed; carries the original error and any recovery failure.

    The message is always the original failure's message. A failed recovery
    restart is kept on ``recovery_error`` for logs, never reported in its place.
    """

    def __init__(
        self,
        project_name: str,
        cause: WebhookDeployerError,
        recovery_error: WebhookDeployerError | None = None,
    ):
        details: dict[str, Any] = {"project": project_name, **cause.details}
        if recovery_error is not None:
            details["recovery_error"] = recovery_error.message
        super().__init__(cause.message, details)
        self.project_name = project_name
        self.cause = cause
        self.recovery_error = recovery_error
