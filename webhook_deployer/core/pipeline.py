"""Deployment pipeline.

Updates one project in place and restarts its process:

1. Check the working directory exists
2. git fetch --all
3. git reset --hard origin/<branch>
4. npm ci
5. npm run build (only when package.json declares a build script)
6. pm2 restart <name>

A failure in steps 2-5 skips the rest and issues one recovery restart. The
caller always sees the original failure.
"""

import json
import shlex
import time
from pathlib import Path

import structlog

from webhook_deployer.core.exceptions import (
    DeploymentFailedError,
    ManifestInvalidError,
    ProjectDirectoryMissingError,
    StepError,
)
from webhook_deployer.core.lock import DeploymentLock
from webhook_deployer.core.runner import CommandRunner
from webhook_deployer.models.deployment import DeploymentResult, DeploymentStep
from webhook_deployer.models.project import ProjectConfig
from webhook_deployer.utils.logging import get_logger

MANIFEST_FILE = "package.json"

FETCH_COMMAND = "git fetch --all"
INSTALL_COMMAND = "npm ci --prefer-offline --no-audit --progress=false"
BUILD_COMMAND = "npm run build"

logger = get_logger(__name__)


def reset_command(branch: str) -> str:
    return f"git reset --hard {shlex.quote('origin/' + branch)}"


def restart_command(pm2_name: str) -> str:
    return f"pm2 restart {shlex.quote(pm2_name)}"


def as_step_error(step: DeploymentStep, error: Exception) -> StepError:
    """Attribute an unexpected exception to the step that raised it."""
    if isinstance(error, StepError):
        return error
    return StepError(step.value, f"Step '{step.value}' failed: {error}")


def has_build_script(project_dir: Path) -> bool:
    """Whether the project's manifest declares ``scripts.build``.

    A missing manifest means there is nothing to build.
    """
    manifest = project_dir / MANIFEST_FILE
    if not manifest.is_file():
        return False
    try:
        package = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
        raise ManifestInvalidError(DeploymentStep.BUILD.value, str(manifest), str(e)) from e
    if not isinstance(package, dict):
        return False
    scripts = package.get("scripts")
    return isinstance(scripts, dict) and bool(scripts.get("build"))


class DeploymentPipeline:
    """Runs deployments one at a time through an injected lock and runner."""

    def __init__(self, runner: CommandRunner, lock: DeploymentLock | None = None):
        self.runner = runner
        self.lock = lock or DeploymentLock()

    @property
    def busy(self) -> bool:
        return self.lock.locked

    async def deploy(
        self,
        project: ProjectConfig,
        branch: str | None = None,
        *,
        request_id: str | None = None,
    ) -> DeploymentResult:
        """Deploy ``project`` at ``branch`` (defaults to its configured branch).

        Raises:
            DeploymentAlreadyInProgressError: another deployment holds the lock
            ProjectDirectoryMissingError: working directory does not exist
            DeploymentFailedError: a step failed (recovery restart attempted)
        """
        with self.lock.held():
            return await self._run(project, branch or project.branch, request_id)

    async def _run(
        self,
        project: ProjectConfig,
        branch: str,
        request_id: str | None,
    ) -> DeploymentResult:
        log = logger.bind(project=project.name, branch=branch)
        if request_id is not None:
            log = log.bind(request_id=request_id)

        start_time = time.perf_counter()
        project_dir = Path(project.dir)
        if not project_dir.is_dir():
            log.error("deployment.directory_missing", dir=project.dir)
            raise ProjectDirectoryMissingError(project.dir)

        log.info("deployment.started", dir=project.dir)
        result = DeploymentResult(project=project.name, branch=branch)

        commands = [
            (DeploymentStep.FETCH, FETCH_COMMAND),
            (DeploymentStep.RESET, reset_command(branch)),
            (DeploymentStep.INSTALL, INSTALL_COMMAND),
        ]
        current = DeploymentStep.FETCH
        try:
            for current, command in commands:
                await self._step(current, command, project, result, log)
            current = DeploymentStep.BUILD
            if has_build_script(project_dir):
                await self._step(DeploymentStep.BUILD, BUILD_COMMAND, project, result, log)
                result.built = True
            else:
                log.info("deployment.build_skipped", reason="no build script")
        except Exception as e:
            error = as_step_error(current, e)
            log.error("deployment.failed", step=error.step, error=error.message)
            recovery_error = await self._recover(project, log)
            raise DeploymentFailedError(project.name, error, recovery_error) from e

        try:
            await self._step(
                DeploymentStep.RESTART, restart_command(project.pm2_name), project, result, log
            )
        except Exception as e:
            error = as_step_error(DeploymentStep.RESTART, e)
            log.error("deployment.failed", step=error.step, error=error.message)
            raise DeploymentFailedError(project.name, error) from e

        result.duration_ms = int((time.perf_counter() - start_time) * 1000)
        log.info("deployment.completed", built=result.built, duration_ms=result.duration_ms)
        return result

    async def _step(
        self,
        step: DeploymentStep,
        command: str,
        project: ProjectConfig,
        result: DeploymentResult,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        log.info("deployment.step", step=step.value)
        await self.runner.run(command, project.dir, step=step, log=log)
        result.steps.append(step)

    async def _recover(
        self,
        project: ProjectConfig,
        log: structlog.stdlib.BoundLogger,
    ) -> StepError | None:
        """Best-effort restart after a failure. Returns the restart error, if any."""
        log.warning("deployment.recovery_started", pm2_name=project.pm2_name)
        try:
            await self.runner.run(
                restart_command(project.pm2_name),
                project.dir,
                step=DeploymentStep.RECOVERY_RESTART,
                log=log,
            )
        except Exception as e:
            error = as_step_error(DeploymentStep.RECOVERY_RESTART, e)
            log.error("deployment.recovery_failed", error=error.message)
            return error
        log.info("deployment.recovered")
        return None
