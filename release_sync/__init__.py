"""Publish one release to several code hosting platforms."""

__version__ = "0.1.0"

from release_sync.exceptions import (
    AssetError,
    ConfigurationError,
    FatalPhaseError,
    ReleaseSyncError,
)

__all__ = [
    "__version__",
    "ReleaseSyncError",
    "ConfigurationError",
    "FatalPhaseError",
    "AssetError",
]
