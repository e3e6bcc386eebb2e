"""Pydantic v2 configuration models for release_sync.yml.

These models provide:
- Per-platform credential and identity sections
- A declared set of required fields per platform for pre-flight checks
- Per-call timeouts
- Environment variable override support
"""

from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class PlatformConfig(BaseModel):
    """Base class for per-platform configuration sections.

    Subclasses list the fields that must be non-empty when the platform is
    selected. Unselected platforms may leave them empty.
    """

    required_fields: ClassVar[tuple[str, ...]] = ()

    def missing_fields(self) -> list[str]:
        """Return the required fields that are unset or blank."""
        missing = []
        for name in self.required_fields:
            value = getattr(self, name, None)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing


class GitHubConfig(PlatformConfig):
    """GitHub repository and release configuration."""

    required_fields: ClassVar[tuple[str, ...]] = ("token", "owner", "repo")

    token: str = Field(default="", repr=False, description="GitHub access token")
    owner: str = Field(default="", description="GitHub repository owner")
    repo: str = Field(default="", description="GitHub repository name")
    api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL",
    )
    uploads_url: str = Field(
        default="https://uploads.github.com",
        description="GitHub asset upload base URL",
    )
    reuse_existing_release: bool = Field(
        default=False,
        description="Reuse the release when GitHub reports it already exists",
    )


class GiteeConfig(PlatformConfig):
    """Gitee repository and release configuration."""

    required_fields: ClassVar[tuple[str, ...]] = ("token", "owner", "repo")

    token: str = Field(default="", repr=False, description="Gitee access token")
    owner: str = Field(default="", description="Gitee repository owner")
    repo: str = Field(default="", description="Gitee repository name")
    api_url: str = Field(
        default="https://gitee.com/api/v5",
        description="Gitee API base URL",
    )
    probe_retries: int = Field(
        default=0,
        ge=0,
        le=5,
        description="Retries for a tag probe that got no response (timeouts only)",
    )
    probe_retry_delay: float = Field(
        default=1.0,
        ge=0,
        le=30,
        description="Seconds before the first probe retry, doubled for each further retry",
    )


class TimeoutsConfig(BaseModel):
    """Per-call timeouts in seconds."""

    probe: float = Field(
        default=30,
        gt=0,
        description="Existence probes and lookups",
    )
    create: float = Field(
        default=60,
        gt=0,
        description="Tag and release creation",
    )
    upload: float = Field(
        default=300,
        gt=0,
        description="Single asset upload",
    )

    @field_validator("upload")
    @classmethod
    def validate_upload(cls, v: float) -> float:
        if v < 30:
            raise ValueError("upload timeout must be at least 30 seconds")
        return v


class SyncConfig(BaseSettings):
    """Root configuration model for release_sync.yml.

    Supports environment variable overrides with RELEASE_SYNC_ prefix.
    Example: RELEASE_SYNC_GITEE__OWNER=my-org
    """

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    gitee: GiteeConfig = Field(default_factory=GiteeConfig)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)

    model_config = {
        "env_prefix": "RELEASE_SYNC_",
        "env_nested_delimiter": "__",
    }

    def platform(self, name: str) -> PlatformConfig | None:
        """Return the configuration section for a platform, if there is one."""
        section = getattr(self, name, None)
        return section if isinstance(section, PlatformConfig) else None
