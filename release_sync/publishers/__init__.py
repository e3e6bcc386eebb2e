"""Publisher modules for hosting platform releases."""

# Import publishers to trigger registration
from release_sync.publishers import (
    gitee,  # noqa: F401
    github,  # noqa: F401
)
from release_sync.publishers.base import (
    AssetOutcome,
    AssetStatus,
    Phase,
    Publisher,
    PublisherRegistry,
    PublishOutcome,
    PublishStatus,
    ReleaseRequest,
)
from release_sync.publishers.reconcile import (
    ProbeResult,
    ProbeStatus,
    ReconcileAction,
    probe_then_create,
)

__all__ = [
    "AssetOutcome",
    "AssetStatus",
    "Phase",
    "Publisher",
    "PublisherRegistry",
    "PublishOutcome",
    "PublishStatus",
    "ReleaseRequest",
    "ProbeResult",
    "ProbeStatus",
    "ReconcileAction",
    "probe_then_create",
]
