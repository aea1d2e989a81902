"""Pytest configuration and fixtures."""

import asyncio
import json
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from webhook_deployer.config import Settings
from webhook_deployer.core.lock import DeploymentLock
from webhook_deployer.core.pipeline import DeploymentPipeline
from webhook_deployer.core.projects import ProjectRegistry
from webhook_deployer.core.signature import compute_signature
from webhook_deployer.main import create_app
from webhook_deployer.models.deployment import CommandResult, DeploymentStep
from webhook_deployer.models.project import ProjectConfig

DEMO_SECRET = "s3cr3t"


class FakeCommandRunner:
    """Records commands instead of running them.

    ``failures`` maps a step to the error it should raise. When ``gate`` is
    set every command waits on it, which keeps a deployment in flight.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[DeploymentStep, str, str]] = []
        self.failures: dict[DeploymentStep, Exception] = {}
        self.gate: asyncio.Event | None = None
        self.started = asyncio.Event()

    @property
    def steps(self) -> list[DeploymentStep]:
        return [step for step, _, _ in self.calls]

    @property
    def commands(self) -> list[str]:
        return [command for _, command, _ in self.calls]

    async def run(self, command, cwd, *, step, log=None, timeout=None) -> CommandResult:
        self.calls.append((step, command, cwd))
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        failure = self.failures.get(step)
        if failure is not None:
            raise failure
        return CommandResult(command=command)


def sign(body: bytes, secret: str = DEMO_SECRET) -> dict[str, str]:
    """Headers for a correctly signed webhook."""
    return {
        "X-Hub-Signature-256": compute_signature(secret, body),
        "Content-Type": "application/json",
    }


def write_manifest(project_dir: Path, scripts: dict[str, str] | None = None) -> None:
    package = {"name": "demo", "version": "1.0.0"}
    if scripts is not None:
        package["scripts"] = scripts
    (project_dir / "package.json").write_text(json.dumps(package))


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Working directory of the demo project (with a build script)."""
    directory = tmp_path / "demo"
    directory.mkdir()
    write_manifest(directory, {"start": "node index.js", "build": "tsc"})
    return directory


@pytest.fixture
def demo_project(project_dir: Path) -> ProjectConfig:
    return ProjectConfig(
        name="demo",
        dir=str(project_dir),
        pm2Name="demo-app",
        secret=DEMO_SECRET,
        branch="main",
    )


@pytest.fixture
def registry(demo_project: ProjectConfig) -> ProjectRegistry:
    return ProjectRegistry({demo_project.name: demo_project})


@pytest.fixture
def runner() -> FakeCommandRunner:
    return FakeCommandRunner()


@pytest.fixture
def pipeline(runner: FakeCommandRunner) -> DeploymentPipeline:
    """A pipeline with its own lock and a fake runner."""
    return DeploymentPipeline(runner, DeploymentLock())


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, deploy_projects="", log_level="DEBUG")


@pytest.fixture
def app(settings: Settings, runner: FakeCommandRunner, registry: ProjectRegistry):
    return create_app(settings, runner=runner, registry=registry)


@pytest.fixture
async def client(app) -> AsyncClient:
    """Async test client against a fresh app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
