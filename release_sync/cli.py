"""Command-line interface for release-sync.

Provides commands for:
- publish: Publish a release to one or more platforms
- validate: Check platform configuration without network calls
- platforms: List supported platforms
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from release_sync import __version__
from release_sync.assets import resolve_asset_files
from release_sync.config.loader import apply_overrides, load_config
from release_sync.config.models import SyncConfig
from release_sync.exceptions import ConfigurationError, ReleaseSyncError
from release_sync.publishers import PublisherRegistry, PublishStatus, ReleaseRequest
from release_sync.publishers.base import DEFAULT_TARGET
from release_sync.sync import ReleaseSync, SyncReport, parse_platforms

app = typer.Typer(
    name="release-sync",
    help="Publish one release to GitHub, Gitee and other code hosting platforms",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"release-sync version {__version__}")
        raise typer.Exit()


def parse_repository(value: str | None) -> tuple[str | None, str | None]:
    """Split an 'owner/repo' value.

    Raises:
        ConfigurationError: If the value is not of the form owner/repo
    """
    if not value:
        return None, None
    owner, sep, repo = value.strip().partition("/")
    if not sep or not owner or not repo or "/" in repo:
        raise ConfigurationError(
            f"Invalid repository: {value}",
            fix_hint="Use the form owner/repo, e.g. octocat/hello-world",
        )
    return owner, repo


def build_config(
    config: Path | None,
    github_token: str | None,
    github_repository: str | None,
    gitee_token: str | None,
    gitee_owner: str | None,
    gitee_repo: str | None,
) -> SyncConfig:
    """Load the config file and merge command-line values over it."""
    cfg = load_config(config)
    github_owner, github_repo = parse_repository(github_repository)
    return apply_overrides(
        cfg,
        {
            "github": {
                "token": github_token,
                "owner": github_owner,
                "repo": github_repo,
            },
            "gitee": {
                "token": gitee_token,
                "owner": gitee_owner,
                "repo": gitee_repo,
            },
        },
    )


def read_body(body: str, body_file: Path | None) -> str:
    """Return release notes from --body-file, falling back to --body."""
    if body_file is None:
        return body
    try:
        return body_file.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read release notes file: {body_file}",
            details=str(e),
        ) from e


def display_report(report: SyncReport) -> None:
    """Display per-platform outcomes in a table.

    Args:
        report: Result of a sync run
    """
    table = Table(title="Release Sync Summary")
    table.add_column("Status", style="bold", width=8)
    table.add_column("Platform", style="cyan")
    table.add_column("Release")
    table.add_column("Uploaded", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Failed", justify="right")

    done = {outcome.platform for outcome in report.outcomes}
    for outcome in report.outcomes:
        if outcome.status == PublishStatus.FAILED:
            status = "[red]FAIL[/red]"
        elif outcome.has_asset_failures:
            status = "[yellow]WARN[/yellow]"
        else:
            status = "[green]OK[/green]"
        table.add_row(
            status,
            outcome.platform,
            outcome.release_url or outcome.release_id or "-",
            str(outcome.uploaded),
            str(outcome.skipped),
            str(outcome.failed_assets),
        )
    for platform in report.platforms:
        if platform not in done:
            table.add_row("[dim]-[/dim]", platform, "[dim]not run[/dim]", "", "", "")

    console.print(table)

    # Show details for failed assets
    for outcome in report.outcomes:
        for asset in outcome.assets:
            if asset.reason:
                console.print(
                    f"[yellow]{outcome.platform}:[/yellow] {asset.name} "
                    f"{asset.status.value}: {escape(asset.reason)}"
                )


@app.callback()
def main(
    version: bool = typer.Option(  # noqa: B008
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Publish one release to several code hosting platforms.

    Creates the tag and release with the same metadata and assets on every
    requested platform, stopping at the first platform that fails.
    """
    pass


@app.command()
def publish(
    platforms: str = typer.Option(  # noqa: B008
        ...,
        "--platforms",
        "-p",
        help="Comma-separated platforms, in publishing order (github, gitee)",
    ),
    tag: str = typer.Option(  # noqa: B008
        ...,
        "--tag",
        "-t",
        help="Tag name of the release, e.g. v1.0.0",
    ),
    release_name: str = typer.Option(  # noqa: B008
        ...,
        "--release-name",
        "-n",
        help="Display name of the release",
    ),
    body: str = typer.Option(  # noqa: B008
        "",
        "--body",
        "-b",
        help="Release notes (Markdown)",
    ),
    body_file: Path | None = typer.Option(  # noqa: B008
        None,
        "--body-file",
        help="Read release notes from a file (overrides --body)",
    ),
    draft: bool = typer.Option(  # noqa: B008
        False,
        "--draft",
        help="Create a draft release where the platform supports it",
    ),
    prerelease: bool = typer.Option(  # noqa: B008
        False,
        "--prerelease",
        help="Mark the release as a prerelease",
    ),
    target_commitish: str = typer.Option(  # noqa: B008
        DEFAULT_TARGET,
        "--target-commitish",
        help="Branch or commit new tags point at (Gitee)",
    ),
    assets: str | None = typer.Option(  # noqa: B008
        None,
        "--assets",
        "-a",
        help="Whitespace-separated asset paths or glob patterns",
    ),
    github_token: str | None = typer.Option(  # noqa: B008
        None,
        "--github-token",
        envvar="GITHUB_TOKEN",
        help="GitHub access token",
    ),
    github_repository: str | None = typer.Option(  # noqa: B008
        None,
        "--github-repository",
        envvar="GITHUB_REPOSITORY",
        help="GitHub repository as owner/repo",
    ),
    gitee_token: str | None = typer.Option(  # noqa: B008
        None,
        "--gitee-token",
        envvar="GITEE_TOKEN",
        help="Gitee access token",
    ),
    gitee_owner: str | None = typer.Option(  # noqa: B008
        None,
        "--gitee-owner",
        help="Gitee repository owner",
    ),
    gitee_repo: str | None = typer.Option(  # noqa: B008
        None,
        "--gitee-repo",
        help="Gitee repository name",
    ),
    config: Path | None = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False,
        "--verbose",
        "-v",
        help="Show detailed output",
    ),
) -> None:
    """Publish a release to the requested platforms.

    Platforms run in the given order. The first fatal error stops the run;
    releases already published on earlier platforms are kept. Failed asset
    uploads are reported but do not fail the run.

    Examples:
        release-sync publish -p github -t v1.0.0 -n "1.0.0"
        release-sync publish -p github,gitee -t v1.0.0 -n "1.0.0" \\
            --gitee-owner me --gitee-repo app -a "dist/*.zip"
    """
    try:
        cfg = build_config(
            config,
            github_token,
            github_repository,
            gitee_token,
            gitee_owner,
            gitee_repo,
        )
        asset_files = resolve_asset_files(assets, verbose=verbose)
        request = ReleaseRequest(
            tag=tag,
            name=release_name,
            body=read_body(body, body_file),
            draft=draft,
            prerelease=prerelease,
            target_commitish=target_commitish,
            assets=tuple(asset_files),
        )
    except ReleaseSyncError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=e.exit_code) from None

    console.print(
        f"Release {request.tag} to {', '.join(parse_platforms(platforms)) or '-'} "
        f"with {len(request.assets)} asset(s)"
    )

    report = ReleaseSync(cfg, verbose=verbose).run(request, platforms)
    display_report(report)

    if not report.success:
        console.print("\n[red]Release sync failed.[/red]")
        raise typer.Exit(code=report.exit_code)

    if report.has_asset_failures:
        console.print("\n[yellow]Release published with asset problems.[/yellow]")
    else:
        console.print("\n[green]Release published to all platforms![/green]")


@app.command()
def validate(
    platforms: str = typer.Option(  # noqa: B008
        ...,
        "--platforms",
        "-p",
        help="Comma-separated platforms to check",
    ),
    github_token: str | None = typer.Option(  # noqa: B008
        None,
        "--github-token",
        envvar="GITHUB_TOKEN",
        help="GitHub access token",
    ),
    github_repository: str | None = typer.Option(  # noqa: B008
        None,
        "--github-repository",
        envvar="GITHUB_REPOSITORY",
        help="GitHub repository as owner/repo",
    ),
    gitee_token: str | None = typer.Option(  # noqa: B008
        None,
        "--gitee-token",
        envvar="GITEE_TOKEN",
        help="Gitee access token",
    ),
    gitee_owner: str | None = typer.Option(  # noqa: B008
        None,
        "--gitee-owner",
        help="Gitee repository owner",
    ),
    gitee_repo: str | None = typer.Option(  # noqa: B008
        None,
        "--gitee-repo",
        help="Gitee repository name",
    ),
    config: Path | None = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
) -> None:
    """Check that the requested platforms are supported and configured.

    Makes no network calls.
    """
    try:
        cfg = build_config(
            config,
            github_token,
            github_repository,
            gitee_token,
            gitee_owner,
            gitee_repo,
        )
        publisher_classes = ReleaseSync(cfg).validate(platforms)
    except ReleaseSyncError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=e.exit_code) from None

    names = ", ".join(publisher_class.display_name for publisher_class in publisher_classes)
    console.print(f"[green]Configuration is complete for:[/green] {names}")


@app.command(name="platforms")
def list_platforms() -> None:
    """List supported platforms and their required settings."""
    table = Table(title="Supported Platforms")
    table.add_column("Name", style="cyan")
    table.add_column("Platform")
    table.add_column("Host")
    table.add_column("Required settings")

    for name in PublisherRegistry.list_registered():
        publisher_class = PublisherRegistry.get(name)
        if publisher_class is None:
            continue
        table.add_row(
            name,
            publisher_class.display_name,
            publisher_class.registry_name,
            ", ".join(publisher_class.config_model.required_fields),
        )

    console.print(table)


if __name__ == "__main__":
    app()
