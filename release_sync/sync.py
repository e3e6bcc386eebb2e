"""Release synchronization across platforms.

Coordinates one release over the requested platforms:
1. Parse and validate the platform list
2. Check required configuration for every platform (no network yet)
3. Run each publisher in the requested order
4. Stop at the first fatal error, keeping what earlier platforms published
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import requests
from rich.console import Console
from rich.markup import escape

from release_sync.assets import get_file_info
from release_sync.config.models import SyncConfig
from release_sync.exceptions import ConfigurationError, FatalPhaseError, ReleaseSyncError
from release_sync.publishers import PublisherRegistry
from release_sync.publishers.base import (
    FileReader,
    Publisher,
    PublishOutcome,
    ReleaseRequest,
)

console = Console()


def parse_platforms(raw: str | Sequence[str]) -> list[str]:
    """Normalize a platform list.

    Accepts a comma-separated string or a sequence of names. Names are
    trimmed and lower-cased, blanks dropped, and repeats removed keeping
    the first position.
    """
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    platforms: list[str] = []
    for item in items:
        name = item.strip().lower()
        if name and name not in platforms:
            platforms.append(name)
    return platforms


@dataclass
class SyncReport:
    """Outcomes produced so far plus the error that ended the run, if any."""

    platforms: list[str] = field(default_factory=list)
    outcomes: list[PublishOutcome] = field(default_factory=list)
    error: ReleaseSyncError | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int:
        return 0 if self.error is None else self.error.exit_code

    @property
    def has_asset_failures(self) -> bool:
        return any(outcome.has_asset_failures for outcome in self.outcomes)


@dataclass
class ReleaseSync:
    """Publishes one release to several platforms, one after another."""

    config: SyncConfig
    verbose: bool = False
    session_factory: Callable[[], requests.Session] = requests.Session
    read_file: FileReader = get_file_info
    output: Console = field(default_factory=lambda: console)

    def validate(self, platforms: str | Sequence[str]) -> list[type[Publisher]]:
        """Check that every requested platform is usable.

        Every platform is checked before any publisher runs, so a problem
        with the last platform also prevents the first from publishing.

        Args:
            platforms: Requested platform names

        Returns:
            Publisher classes in the requested order

        Raises:
            ConfigurationError: On an empty list, an unsupported platform, or
                missing required fields
        """
        names = parse_platforms(platforms)
        if not names:
            raise ConfigurationError(
                "No platforms requested",
                fix_hint="Pass --platforms, e.g. --platforms github,gitee",
            )

        supported = PublisherRegistry.list_registered()
        publisher_classes = []
        for name in names:
            publisher_class = PublisherRegistry.get(name)
            if publisher_class is None:
                raise ConfigurationError(
                    f"Unsupported platform: {name}",
                    details=f"Supported platforms: {', '.join(supported)}",
                    fix_hint="Check the --platforms value",
                )

            platform_config = self.config.platform(name)
            if platform_config is None:
                raise ConfigurationError(f"No configuration section for platform: {name}")
            missing = platform_config.missing_fields()
            if missing:
                env_vars = ", ".join(
                    f"RELEASE_SYNC_{name.upper()}__{field_name.upper()}" for field_name in missing
                )
                raise ConfigurationError(
                    f"{publisher_class.display_name} is requested but required "
                    f"settings are missing: {', '.join(missing)}",
                    fix_hint=f"Pass the {name} command-line options, set {env_vars}, "
                    f"or add them to the '{name}' section of the config file",
                )
            publisher_classes.append(publisher_class)

        return publisher_classes

    def build_publisher(self, publisher_class: type[Publisher]) -> Publisher:
        platform_config = self.config.platform(publisher_class.name)
        if platform_config is None:
            raise ConfigurationError(
                f"No configuration section for platform: {publisher_class.name}"
            )
        return PublisherRegistry.create(
            publisher_class.name,
            platform_config,
            timeouts=self.config.timeouts,
            session=self.session_factory(),
            read_file=self.read_file,
            verbose=self.verbose,
            output=self.output,
        )

    def run(self, request: ReleaseRequest, platforms: str | Sequence[str]) -> SyncReport:
        """Publish the release to each platform in order.

        Args:
            request: Release to publish
            platforms: Requested platform names, in publishing order

        Returns:
            SyncReport with per-platform outcomes and the terminating error
        """
        report = SyncReport(platforms=parse_platforms(platforms))

        try:
            publisher_classes = self.validate(report.platforms)
        except ConfigurationError as e:
            self.output.print(f"[red]Error:[/red] {escape(str(e))}")
            report.error = e
            return report

        if self.verbose:
            self.output.print(f"[dim]Platforms: {', '.join(report.platforms)}[/dim]")

        for publisher_class in publisher_classes:
            self.output.print(
                f"\n[bold]Publishing to {publisher_class.display_name}...[/bold]"
            )
            publisher = self.build_publisher(publisher_class)
            try:
                outcome = publisher.publish(request)
            except FatalPhaseError as e:
                self.output.print(f"[red]  Error: {escape(e.message)}[/red]")
                if e.details:
                    self.output.print(f"[dim]  {escape(e.details)}[/dim]")
                report.outcomes.append(PublishOutcome.failed(publisher_class.name, e))
                report.error = e
                return report
            finally:
                publisher.close()

            report.outcomes.append(outcome)
            style = "yellow" if outcome.has_asset_failures else "green"
            self.output.print(
                f"[{style}]  Published {request.tag} to "
                f"{publisher_class.display_name}[/{style}]"
            )

        return report
