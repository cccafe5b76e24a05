from typing import Union
from uuid import UUID

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings

from repo_adapter.exceptions import ConfigurationError
from repo_adapter.models import CommitIdentity, ScaffoldPolicy


# Configuration
class GitSettings(BaseSettings):
    """Hosting provider connection and commit settings, read once at startup."""

    base_url: str
    token: SecretStr
    id_name: str = "ZamineBazi Orchestrator"
    id_email: str = "bot@zaminebazi.com"
    owner_name: str = "zaminebazi"
    branch_name: str = "main"
    repo_private: bool = False
    repo_init: bool = True
    repo_description: str = "Managed by GitAPI"
    sign_deletes: bool = False
    scaffold_policy: ScaffoldPolicy = ScaffoldPolicy.BEST_EFFORT
    request_timeout: int = Field(default=15, ge=1, le=600)

    model_config = {
        "env_prefix": "ORCHESTRATOR_GIT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "case_sensitive": False,
        "frozen": True,
    }

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("Base URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("owner_name", "branch_name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Must not be empty")
        return v

    @field_validator("owner_name")
    @classmethod
    def validate_owner_format(cls, v: str) -> str:
        if "/" in v:
            raise ValueError("Owner must be a single namespace, not owner/repo")
        return v

    @property
    def identity(self) -> CommitIdentity:
        return CommitIdentity(name=self.id_name, email=self.id_email)

    def full_name(self, repository_id: Union[UUID, str]) -> str:
        return f"{self.owner_name}/{repository_id}"


# Loading
def load_settings(**overrides) -> GitSettings:
    """Build settings from the environment, raising ConfigurationError when invalid."""
    try:
        return GitSettings(**overrides)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ConfigurationError(f"Invalid git settings ({fields}): {e}") from e
