"""Deployment data models."""

from enum import Enum

from pydantic import BaseModel, Field


class DeploymentStep(str, Enum):
    """Pipeline steps, in execution order."""

    FETCH = "fetch"
    RESET = "reset"
    INSTALL = "install"
    BUILD = "build"
    RESTART = "restart"
    RECOVERY_RESTART = "recovery_restart"


class CommandResult(BaseModel):
    """Outcome of one external command that exited with status 0."""

    command: str
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0


class DeploymentResult(BaseModel):
    """Result of a completed deployment."""

    project: str
    branch: str
    steps: list[DeploymentStep] = Field(default_factory=list)
    built: bool = False
    duration_ms: int = 0

    @property
    def message(self) -> str:
        return f"Successfully deployed {self.project}"
