"""Unit tests for project configuration loading."""

import json

import pytest

from webhook_deployer.core.exceptions import ConfigurationInvalidError
from webhook_deployer.core.projects import ProjectRegistry
from webhook_deployer.models.project import DeploymentRequest, ProjectConfig


class TestProjectRegistry:
    """Tests for ProjectRegistry."""

    def test_from_json(self):
        text = json.dumps(
            {
                "api": {"dir": "/srv/api", "pm2Name": "api", "secret": "a", "branch": "prod"},
                "web": {"dir": "/srv/web", "pm2Name": "web-app", "secret": "b"},
            }
        )

        registry = ProjectRegistry.from_json(text)

        assert registry.names() == ["api", "web"]
        assert len(registry) == 2
        assert "web" in registry
        web = registry.get("web")
        assert web is not None
        assert web.branch == "main"
        assert web.pm2_name == "web-app"
        assert web.secret.get_secret_value() == "b"
        assert registry.get("api").branch == "prod"

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_config_has_no_projects(self, text):
        registry = ProjectRegistry.from_json(text)
        assert len(registry) == 0
        assert registry.get("anything") is None

    @pytest.mark.parametrize(
        "text",
        [
            "{not json",
            '["a", "b"]',
            '{"api": "oops"}',
            '{"api": {"dir": "/srv/api", "secret": "a"}}',
            '{"api": {"dir": "/srv/api", "pm2Name": "api", "secret": ""}}',
        ],
    )
    def test_invalid_config_raises(self, text: str):
        with pytest.raises(ConfigurationInvalidError):
            ProjectRegistry.from_json(text)

    def test_key_wins_over_name_field(self):
        registry = ProjectRegistry.from_mapping(
            {"api": {"name": "other", "dir": "/srv/api", "pm2Name": "api", "secret": "a"}}
        )
        assert registry.get("api").name == "api"


class TestProjectConfig:
    """Tests for ProjectConfig."""

    def test_immutable(self):
        project = ProjectConfig(name="api", dir="/srv/api", pm2Name="api", secret="a")
        with pytest.raises(Exception):
            project.branch = "dev"

    def test_secret_not_rendered(self):
        project = ProjectConfig(name="api", dir="/srv/api", pm2Name="api", secret="hunter2")
        assert "hunter2" not in repr(project)
        assert "hunter2" not in str(project.model_dump())

    def test_null_branch_defaults_to_main(self):
        project = ProjectConfig(
            name="api", dir="/srv/api", pm2Name="api", secret="a", branch=None
        )
        assert project.branch == "main"


class TestDeploymentRequest:
    """Tests for DeploymentRequest."""

    @pytest.mark.parametrize(
        "ref,branch",
        [
            ("refs/heads/main", "main"),
            ("refs/heads/feature/login", "feature/login"),
            ("refs/tags/v1.0.0", "refs/tags/v1.0.0"),
            ("main", "main"),
            (None, None),
        ],
    )
    def test_branch(self, ref, branch):
        request = DeploymentRequest(project_name="api", body=b"{}", ref=ref)
        assert request.branch == branch
