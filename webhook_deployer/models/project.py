"""Project configuration and inbound request models."""

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

BRANCH_REF_PREFIX = "refs/heads/"


class ProjectConfig(BaseModel):
    """One deployable project. Immutable after load."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(..., min_length=1)
    dir: str = Field(..., min_length=1)
    pm2_name: str = Field(..., alias="pm2Name", min_length=1)
    secret: SecretStr
    branch: str = "main"

    @field_validator("secret")
    @classmethod
    def secret_not_empty(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value():
            raise ValueError("secret must not be empty")
        return v

    @field_validator("branch", mode="before")
    @classmethod
    def default_branch(cls, v: object) -> object:
        # "branch": null or "" in the JSON behaves like an absent key
        return v or "main"


class DeploymentRequest(BaseModel):
    """A push notification as received, before any checks."""

    model_config = ConfigDict(frozen=True)

    project_name: str
    body: bytes
    signature: str | None = None
    ref: str | None = None
    request_id: str | None = None

    @property
    def branch(self) -> str | None:
        """Claimed branch with the refs/heads/ prefix removed."""
        if self.ref is None:
            return None
        return self.ref.removeprefix(BRANCH_REF_PREFIX)
