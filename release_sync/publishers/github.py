"""GitHub Releases publisher.

Creates GitHub releases through the REST API.

Features:
- Creates releases with notes, draft and prerelease flags in one call
- Uploads release assets one at a time
- Optionally reuses a release GitHub reports as already existing

GitHub has no release existence check in this flow: the create call is the
only authority on duplicates.
"""

import mimetypes
import re
from typing import Any, ClassVar
from urllib.parse import quote

from release_sync.assets import FileInfo
from release_sync.config.models import GitHubConfig
from release_sync.exceptions import AssetError
from release_sync.publishers.base import (
    Phase,
    Publisher,
    PublisherRegistry,
    PublishOutcome,
    ReleaseRequest,
)
from release_sync.publishers.reconcile import ReconcileAction, probe_then_create
from release_sync.utils.http import HttpClient, HttpError, json_body

API_VERSION = "2022-11-28"

# upload_url comes back as a URI template: ".../assets{?name,label}"
URI_TEMPLATE_PATTERN = re.compile(r"\{[^}]*\}$")


def is_already_exists(error: HttpError) -> bool:
    """Check whether a create error is GitHub's duplicate release signal.

    GitHub answers 422 with an ``already_exists`` error code when a
    release for the tag exists.
    """
    if error.status_code != 422:
        return False
    return "already_exists" in error.body


@PublisherRegistry.register
class GitHubPublisher(Publisher):
    """Publisher for GitHub Releases.

    Uses the simple flow: create the release, then upload assets to it.
    The target commitish of the request is ignored since GitHub creates
    missing tags itself.
    """

    name: ClassVar[str] = "github"
    display_name: ClassVar[str] = "GitHub Releases"
    registry_name: ClassVar[str] = "github.com"
    config_model: ClassVar[type[GitHubConfig]] = GitHubConfig

    config: GitHubConfig

    def __init__(self, config: GitHubConfig, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self.client = HttpClient(
            config.api_url,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {config.token}",
                "X-GitHub-Api-Version": API_VERSION,
            },
            session=self.session,
        )
        self._upload_url: str | None = None

    @property
    def repo_path(self) -> str:
        return f"repos/{self.config.owner}/{self.config.repo}"

    def publish(self, request: ReleaseRequest) -> PublishOutcome:
        """Publish a GitHub release.

        Args:
            request: Release to publish

        Returns:
            PublishOutcome with the release id and asset outcomes

        Raises:
            FatalPhaseError: If the release cannot be created
        """
        self.info(
            f"Creating release {request.tag} in {self.config.owner}/{self.config.repo}"
        )
        self.detail(f"Release name: {request.name}")
        self.detail(f"Draft: {request.draft}, prerelease: {request.prerelease}")
        self.detail(f"Assets to upload: {len(request.assets)}")

        release = self.create_release(request)

        release_id = release.get("id")
        if release_id is None:
            raise self.fatal(
                Phase.RELEASE,
                f"GitHub response for release {request.tag} has no id",
            )
        release_id = str(release_id)
        release_url = release.get("html_url")
        self.info(f"Release ready - ID: {release_id}, URL: {release_url}")

        self._upload_url = self.asset_upload_url(release_id, release.get("upload_url"))
        assets = self.upload_assets(release_id, request.assets)
        return PublishOutcome.success(
            self.name,
            release_id=release_id,
            release_url=release_url,
            assets=assets,
        )

    def create_release(self, request: ReleaseRequest) -> dict[str, Any]:
        """Create the release, or reuse it when configured to.

        Raises:
            FatalPhaseError: If creation fails (including duplicates, unless
                reuse_existing_release is set)
        """
        payload = {
            "tag_name": request.tag,
            "name": request.name,
            "body": request.body,
            "draft": request.draft,
            "prerelease": request.prerelease,
        }

        def create() -> dict[str, Any]:
            response = self.client.post(
                f"{self.repo_path}/releases",
                json=payload,
                timeout=self.timeouts.create,
            )
            return json_body(response)

        def fetch_existing() -> dict[str, Any]:
            self.warn(f"Release for {request.tag} already exists, reusing it")
            response = self.client.get(
                f"{self.repo_path}/releases/tags/{quote(request.tag, safe='')}",
                timeout=self.timeouts.probe,
            )
            return json_body(response)

        reconciled = probe_then_create(
            platform=self.name,
            phase=Phase.RELEASE.value,
            resource=f'release "{request.tag}"',
            create=create,
            is_duplicate=is_already_exists,
            reuse=fetch_existing if self.config.reuse_existing_release else None,
        )
        if reconciled.action == ReconcileAction.CREATED:
            self.detail(f"Created release {request.tag}")
        return reconciled.data

    def asset_upload_url(self, release_id: str, template: str | None) -> str:
        """Return the URL assets of a release are posted to."""
        if template:
            return URI_TEMPLATE_PATTERN.sub("", template)
        base = self.config.uploads_url.rstrip("/")
        return f"{base}/{self.repo_path}/releases/{release_id}/assets"

    def upload_asset(self, release_id: str, info: FileInfo) -> None:
        """Upload one asset as raw bytes.

        Raises:
            AssetError: If GitHub rejects the upload or it times out
        """
        url = self._upload_url or self.asset_upload_url(release_id, None)
        content_type = mimetypes.guess_type(info.name)[0] or "application/octet-stream"
        self.detail(f"Uploading {info.name} ({info.size} bytes) to release {release_id}")
        try:
            self.client.post(
                url,
                params={"name": info.name},
                data=info.content,
                headers={"Content-Type": content_type},
                timeout=self.timeouts.upload,
            )
        except HttpError as e:
            raise AssetError(
                f"Failed to upload {info.name}",
                asset=info.name,
                cause=e,
            ) from e
