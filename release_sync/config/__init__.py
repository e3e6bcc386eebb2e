"""Configuration management for release-sync."""

from release_sync.config.loader import apply_overrides, load_config
from release_sync.config.models import (
    GiteeConfig,
    GitHubConfig,
    PlatformConfig,
    SyncConfig,
    TimeoutsConfig,
)

__all__ = [
    "SyncConfig",
    "PlatformConfig",
    "GitHubConfig",
    "GiteeConfig",
    "TimeoutsConfig",
    "load_config",
    "apply_overrides",
]
