"""Unit tests for release_sync.config.models module.

Tests cover:
- Required field checks per platform
- Timeout validation
- Environment variable overrides
- Platform section lookup
"""

import pytest
from pydantic import ValidationError

from release_sync.config.models import (
    GiteeConfig,
    GitHubConfig,
    SyncConfig,
    TimeoutsConfig,
)


class TestPlatformConfig:
    """Tests for missing_fields() on platform sections."""

    def test_empty_github_misses_everything(self) -> None:
        assert GitHubConfig().missing_fields() == ["token", "owner", "repo"]

    def test_blank_values_count_as_missing(self) -> None:
        """Whitespace-only values are treated as unset."""
        config = GiteeConfig(token="t", owner="   ", repo="app")

        assert config.missing_fields() == ["owner"]

    def test_complete_config(self, github_config: GitHubConfig) -> None:
        assert github_config.missing_fields() == []

    def test_token_not_in_repr(self) -> None:
        assert "secret-token" not in repr(GitHubConfig(token="secret-token"))

    def test_defaults(self) -> None:
        assert GitHubConfig().api_url == "https://api.github.com"
        assert GitHubConfig().reuse_existing_release is False
        assert GiteeConfig().api_url == "https://gitee.com/api/v5"
        assert GiteeConfig().probe_retries == 0
        assert GiteeConfig().probe_retry_delay == 1.0

    def test_probe_retries_bounds(self) -> None:
        with pytest.raises(ValidationError):
            GiteeConfig(probe_retries=-1)
        with pytest.raises(ValidationError):
            GiteeConfig(probe_retries=6)
        with pytest.raises(ValidationError):
            GiteeConfig(probe_retry_delay=-1)


class TestTimeoutsConfig:
    """Tests for TimeoutsConfig."""

    def test_defaults(self) -> None:
        timeouts = TimeoutsConfig()

        assert timeouts.probe == 30
        assert timeouts.create == 60
        assert timeouts.upload == 300

    def test_zero_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TimeoutsConfig(probe=0)

    def test_short_upload_timeout_rejected(self) -> None:
        """Uploads need at least 30 seconds."""
        with pytest.raises(ValidationError) as exc_info:
            TimeoutsConfig(upload=10)
        assert "at least 30 seconds" in str(exc_info.value)


class TestSyncConfig:
    """Tests for the root configuration."""

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """RELEASE_SYNC_<SECTION>__<FIELD> sets nested values."""
        monkeypatch.setenv("RELEASE_SYNC_GITEE__OWNER", "my-org")
        monkeypatch.setenv("RELEASE_SYNC_TIMEOUTS__PROBE", "5")

        config = SyncConfig()

        assert config.gitee.owner == "my-org"
        assert config.timeouts.probe == 5

    def test_platform_lookup(self) -> None:
        config = SyncConfig()

        assert isinstance(config.platform("github"), GitHubConfig)
        assert isinstance(config.platform("gitee"), GiteeConfig)

    def test_platform_lookup_ignores_non_platform_sections(self) -> None:
        config = SyncConfig()

        assert config.platform("timeouts") is None
        assert config.platform("bitbucket") is None
