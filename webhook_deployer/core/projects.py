"""Registry of configured projects."""

import json
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from webhook_deployer.core.exceptions import ConfigurationInvalidError
from webhook_deployer.models.project import ProjectConfig


class ProjectRegistry:
    """Read-only mapping of project name -> ProjectConfig, built once at startup."""

    def __init__(self, projects: Mapping[str, ProjectConfig] | None = None):
        self._projects: dict[str, ProjectConfig] = dict(projects or {})

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ProjectRegistry":
        """Build from ``{name: {dir, pm2Name, secret, branch?}}``."""
        projects: dict[str, ProjectConfig] = {}
        for name, entry in raw.items():
            if not isinstance(entry, Mapping):
                raise ConfigurationInvalidError(
                    f"Project '{name}' must be an object",
                    {"project": name},
                )
            try:
                projects[name] = ProjectConfig.model_validate({**entry, "name": name})
            except ValidationError as e:
                raise ConfigurationInvalidError(
                    f"Invalid configuration for project '{name}': {e}",
                    {"project": name},
                ) from e
        return cls(projects)

    @classmethod
    def from_json(cls, text: str | None) -> "ProjectRegistry":
        """Parse the DEPLOY_PROJECTS value. Empty input means no projects."""
        if not text or not text.strip():
            return cls()
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigurationInvalidError(f"Invalid DEPLOY_PROJECTS format: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigurationInvalidError("DEPLOY_PROJECTS must be a JSON object")
        return cls.from_mapping(raw)

    def get(self, name: str) -> ProjectConfig | None:
        """Get a project by name."""
        return self._projects.get(name)

    def names(self) -> list[str]:
        return list(self._projects)

    def __contains__(self, name: object) -> bool:
        return name in self._projects

    def __iter__(self) -> Iterator[ProjectConfig]:
        return iter(self._projects.values())

    def __len__(self) -> int:
        return len(self._projects)
