"""Abstract base class for release publishers.

Publishers push one release to one hosting platform:
- GitHub Releases
- Gitee Releases

Every publisher takes the same immutable ReleaseRequest and returns a
PublishOutcome, or raises FatalPhaseError when a phase the release cannot
do without has failed. Asset uploads share one sequential loop that turns
per-asset problems into AssetOutcome entries instead of errors.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar

import requests
from rich.console import Console
from rich.markup import escape

from release_sync.assets import FileInfo, get_file_info
from release_sync.config.models import PlatformConfig, TimeoutsConfig
from release_sync.exceptions import AssetError, ConfigurationError, FatalPhaseError

console = Console()

DEFAULT_TARGET = "master"


class Phase(str, Enum):
    """Publisher phases, in the order a reconciling publisher runs them."""

    TAG = "tag"
    RELEASE = "release"
    RELEASE_ID = "release-id"


class AssetStatus(Enum):
    """Status of a single asset upload."""

    UPLOADED = "uploaded"
    SKIPPED = "skipped"
    FAILED = "failed"


class PublishStatus(Enum):
    """Overall status of one platform run."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ReleaseRequest:
    """The release to publish, identical for every platform.

    Attributes:
        tag: Git tag name, unique per platform
        name: Display name of the release
        body: Markdown release notes
        draft: Create as draft (ignored where unsupported)
        prerelease: Mark as prerelease
        target_commitish: Branch or commit a new tag points at (ignored
            where the platform has no tag creation step)
        assets: Absolute paths of the files to attach
    """

    tag: str
    name: str
    body: str = ""
    draft: bool = False
    prerelease: bool = False
    target_commitish: str = DEFAULT_TARGET
    assets: tuple[Path, ...] = ()

    def __post_init__(self) -> None:
        if not self.tag or not self.tag.strip():
            raise ConfigurationError("Release tag must not be empty", fix_hint="Pass --tag")
        if not self.name or not self.name.strip():
            raise ConfigurationError(
                "Release name must not be empty", fix_hint="Pass --release-name"
            )
        if not self.target_commitish:
            object.__setattr__(self, "target_commitish", DEFAULT_TARGET)
        object.__setattr__(self, "assets", tuple(Path(p) for p in self.assets))


@dataclass
class AssetOutcome:
    """Result of one asset upload attempt.

    Attributes:
        path: Local file path
        name: Uploaded file name
        size: Size in bytes (0 when the file could not be read)
        status: Uploaded, skipped or failed
        reason: Why the asset was skipped or failed
    """

    path: Path
    name: str
    size: int
    status: AssetStatus
    reason: str | None = None

    @classmethod
    def uploaded(cls, path: Path, info: FileInfo) -> "AssetOutcome":
        return cls(path=path, name=info.name, size=info.size, status=AssetStatus.UPLOADED)

    @classmethod
    def skipped(cls, path: Path, reason: str) -> "AssetOutcome":
        return cls(
            path=path,
            name=Path(path).name,
            size=0,
            status=AssetStatus.SKIPPED,
            reason=reason,
        )

    @classmethod
    def failed(cls, path: Path, info: FileInfo, reason: str) -> "AssetOutcome":
        return cls(
            path=path,
            name=info.name,
            size=info.size,
            status=AssetStatus.FAILED,
            reason=reason,
        )


@dataclass
class PublishOutcome:
    """Result of publishing to one platform.

    A successful outcome may still carry failed assets; only a failed
    outcome stops the run.
    """

    platform: str
    status: PublishStatus
    release_id: str | None = None
    release_url: str | None = None
    assets: list[AssetOutcome] = field(default_factory=list)
    error: Exception | None = None

    @classmethod
    def success(
        cls,
        platform: str,
        release_id: str,
        release_url: str | None = None,
        assets: list[AssetOutcome] | None = None,
    ) -> "PublishOutcome":
        return cls(
            platform=platform,
            status=PublishStatus.SUCCESS,
            release_id=release_id,
            release_url=release_url,
            assets=list(assets or []),
        )

    @classmethod
    def failed(cls, platform: str, error: Exception) -> "PublishOutcome":
        return cls(platform=platform, status=PublishStatus.FAILED, error=error)

    def _count(self, status: AssetStatus) -> int:
        return sum(1 for asset in self.assets if asset.status == status)

    @property
    def uploaded(self) -> int:
        return self._count(AssetStatus.UPLOADED)

    @property
    def skipped(self) -> int:
        return self._count(AssetStatus.SKIPPED)

    @property
    def failed_assets(self) -> int:
        return self._count(AssetStatus.FAILED)

    @property
    def has_asset_failures(self) -> bool:
        return self.skipped > 0 or self.failed_assets > 0


FileReader = Callable[[Path], FileInfo | None]


class Publisher(ABC):
    """Abstract base class for all publishers.

    Subclasses implement publish() and upload_asset(); the asset loop is
    shared so that every platform counts outcomes the same way.
    """

    # Class-level attributes to be defined by subclasses
    name: ClassVar[str]
    display_name: ClassVar[str]
    registry_name: ClassVar[str]
    config_model: ClassVar[type[PlatformConfig]]

    def __init__(
        self,
        config: PlatformConfig,
        timeouts: TimeoutsConfig | None = None,
        session: requests.Session | None = None,
        read_file: FileReader = get_file_info,
        verbose: bool = False,
        output: Console | None = None,
    ) -> None:
        if not isinstance(config, self.config_model):
            raise TypeError(
                f"{type(self).__name__} expects {self.config_model.__name__}, "
                f"got {type(config).__name__}"
            )
        self.config = config
        self.timeouts = timeouts or TimeoutsConfig()
        self.session = session if session is not None else requests.Session()
        self.read_file = read_file
        self.verbose = verbose
        self.console = output or console

    @abstractmethod
    def publish(self, request: ReleaseRequest) -> PublishOutcome:
        """Publish the release to the platform.

        Args:
            request: Release to publish (never modified)

        Returns:
            PublishOutcome with release id and per-asset outcomes

        Raises:
            FatalPhaseError: If a non-asset phase failed
        """

    @abstractmethod
    def upload_asset(self, release_id: str, info: FileInfo) -> None:
        """Upload one asset to an existing release.

        Raises:
            AssetError: If the upload failed
        """

    def close(self) -> None:
        """Release network resources held by the publisher."""
        self.session.close()

    def info(self, message: str) -> None:
        self.console.print(f"[bold cyan]>[/bold cyan] {self.name}: {escape(message)}")

    def detail(self, message: str) -> None:
        if self.verbose:
            self.console.print(f"[dim]  {escape(message)}[/dim]")

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow]  Warning:[/yellow] {self.name}: {escape(message)}")

    def fatal(
        self,
        phase: Phase,
        message: str,
        cause: BaseException | None = None,
        **kwargs: Any,
    ) -> FatalPhaseError:
        """Build a FatalPhaseError for this publisher."""
        return FatalPhaseError(
            message,
            platform=self.name,
            phase=phase.value,
            cause=cause,
            **kwargs,
        )

    def upload_assets(self, release_id: str, paths: Sequence[Path]) -> list[AssetOutcome]:
        """Upload assets one at a time and record each outcome.

        Unreadable files are skipped, failed uploads are recorded, and the
        loop always reaches the last asset.

        Args:
            release_id: Platform id of the release
            paths: Files to upload, in order

        Returns:
            One AssetOutcome per path, in the same order
        """
        if not paths:
            self.detail("No release assets specified, skipping asset upload")
            return []

        outcomes: list[AssetOutcome] = []
        total = len(paths)
        for index, path in enumerate(paths, start=1):
            self.detail(f"Processing asset {index}/{total}: {path}")
            info = self.read_file(path)
            if info is None:
                self.warn(f"Skipping asset {path}: file could not be read")
                outcomes.append(AssetOutcome.skipped(path, "file could not be read"))
                continue

            try:
                self.upload_asset(release_id, info)
            except AssetError as e:
                reason = e.details or e.message
                self.warn(f"Failed to upload {info.name}: {reason}")
                outcomes.append(AssetOutcome.failed(path, info, reason))
                continue

            self.detail(f"Uploaded {info.name} ({info.size} bytes)")
            outcomes.append(AssetOutcome.uploaded(path, info))

        uploaded = sum(1 for o in outcomes if o.status == AssetStatus.UPLOADED)
        skipped = sum(1 for o in outcomes if o.status == AssetStatus.SKIPPED)
        failed = sum(1 for o in outcomes if o.status == AssetStatus.FAILED)
        style = "green" if uploaded == total else "yellow"
        self.console.print(
            f"[{style}]  Assets: {uploaded} uploaded, {skipped} skipped, "
            f"{failed} failed (of {total})[/{style}]"
        )
        return outcomes


class PublisherRegistry:
    """Registry for publisher implementations.

    Maps platform identifiers to publisher classes.
    """

    _publishers: dict[str, type[Publisher]] = {}

    @classmethod
    def register(cls, publisher_class: type[Publisher]) -> type[Publisher]:
        """Register a publisher class.

        Can be used as a decorator:
            @PublisherRegistry.register
            class GitHubPublisher(Publisher):
                ...

        Args:
            publisher_class: Publisher class to register

        Returns:
            The registered class (for decorator usage)

        Raises:
            TypeError: If publisher_class is missing required attributes
            ValueError: If a publisher with the same name is already registered
        """
        required_attrs = ["name", "display_name", "registry_name", "config_model"]
        missing = [attr for attr in required_attrs if not hasattr(publisher_class, attr)]
        if missing:
            raise TypeError(
                f"Publisher class {publisher_class.__name__} missing required "
                f"class attributes: {', '.join(missing)}. "
                "All publishers must define 'name', 'display_name', 'registry_name' "
                "and 'config_model'."
            )

        name = publisher_class.name
        if not isinstance(name, str) or not name or name != name.lower():
            raise TypeError(
                f"Publisher {publisher_class.__name__}.name must be a non-empty "
                f"lower-case string, got {type(name).__name__}: {name!r}"
            )

        # Re-registering the same class is a no-op
        if name in cls._publishers:
            existing = cls._publishers[name]
            if existing is not publisher_class:
                raise ValueError(
                    f"Publisher name '{name}' already registered by {existing.__name__}. "
                    f"Cannot register {publisher_class.__name__}."
                )
            return publisher_class

        cls._publishers[name] = publisher_class
        return publisher_class

    @classmethod
    def get(cls, name: str) -> type[Publisher] | None:
        """Get a publisher class by name.

        Args:
            name: Publisher name

        Returns:
            Publisher class or None if not found
        """
        return cls._publishers.get(name)

    @classmethod
    def create(cls, name: str, config: PlatformConfig, **kwargs: Any) -> Publisher:
        """Instantiate a registered publisher.

        Args:
            name: Publisher name
            config: Configuration section for the platform
            **kwargs: Passed to the publisher constructor

        Returns:
            Publisher instance

        Raises:
            ConfigurationError: If no publisher is registered under name
        """
        publisher_class = cls.get(name)
        if publisher_class is None:
            raise ConfigurationError(
                f"Unsupported platform: {name}",
                details=f"Supported platforms: {', '.join(cls.list_registered())}",
            )
        return publisher_class(config, **kwargs)

    @classmethod
    def list_registered(cls) -> list[str]:
        """List all registered publisher names.

        Returns:
            List of publisher names
        """
        return list(cls._publishers.keys())
