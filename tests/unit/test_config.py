"""Unit tests for settings and logging setup."""

import json
import logging

import pytest
import structlog

from webhook_deployer.config import Settings
from webhook_deployer.utils.logging import configure_logging, get_logger


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        for name in ("DEPLOY_PROJECTS", "PORT", "API_HOST", "COMMAND_TIMEOUT_SECONDS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.deploy_projects == ""
        assert settings.port == 8080
        assert settings.api_host == "localhost"
        assert settings.command_timeout_seconds == 300
        assert settings.rate_limit_max_requests == 10
        assert settings.rate_limit_window_seconds == 900
        assert settings.hide_unknown_projects is False

    def test_reads_environment(self, monkeypatch):
        projects = json.dumps({"api": {"dir": "/srv/api", "pm2Name": "api", "secret": "x"}})
        monkeypatch.setenv("DEPLOY_PROJECTS", projects)
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("HIDE_UNKNOWN_PROJECTS", "true")

        settings = Settings(_env_file=None)

        assert settings.deploy_projects == projects
        assert settings.port == 9000
        assert settings.hide_unknown_projects is True

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, command_timeout_seconds=0)


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        structlog.reset_defaults()
        for handler in root.handlers:
            handler.close()
        root.handlers = handlers
        root.setLevel(level)

    def test_json_lines_to_file(self, tmp_path):
        log_file = tmp_path / "logs" / "deployer.log"
        settings = Settings(_env_file=None, log_format="json", log_file=str(log_file))

        configure_logging(settings)
        structlog.contextvars.bind_contextvars(request_id="req-9")
        try:
            get_logger("test").info("deployment.started", project="demo")
        finally:
            structlog.contextvars.clear_contextvars()
        for handler in logging.getLogger().handlers:
            handler.flush()

        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["event"] == "deployment.started"
        assert record["project"] == "demo"
        assert record["request_id"] == "req-9"
        assert record["level"] == "info"
