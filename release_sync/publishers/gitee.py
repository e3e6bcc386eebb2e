"""Gitee Releases publisher.

Publishes releases through the Gitee v5 API, which needs more steps than
GitHub:

1. Tag: probe the tag and create it at the target commitish when the probe
   answers 404. Any other probe failure is fatal and nothing is created.
2. Release: create the release (Gitee has no draft releases).
3. Release id: look the release up by tag, since creation does not return
   an id usable for uploads.
4. Assets: attach files one at a time; failures are counted, never fatal.
"""

from enum import Enum
from typing import Any, ClassVar
from urllib.parse import quote

from release_sync.assets import FileInfo
from release_sync.config.models import GiteeConfig
from release_sync.exceptions import AssetError
from release_sync.publishers.base import (
    Phase,
    Publisher,
    PublisherRegistry,
    PublishOutcome,
    ReleaseRequest,
)
from release_sync.publishers.reconcile import (
    ProbeResult,
    ReconcileAction,
    probe,
    probe_then_create,
)
from release_sync.utils.http import HttpClient, HttpError, json_body


class GiteeState(Enum):
    """States of one Gitee publishing run."""

    START = "start"
    TAG_FOUND = "tag_found"
    TAG_CREATED = "tag_created"
    RELEASE_CREATED = "release_created"
    RELEASE_ID_RESOLVED = "release_id_resolved"
    ASSETS_UPLOADING = "assets_uploading"
    DONE = "done"


@PublisherRegistry.register
class GiteePublisher(Publisher):
    """Publisher for Gitee Releases.

    The tag is reconciled before the release is created, so rerunning for
    the same tag never creates the tag twice. The release itself has no
    existence check; a rerun attempts to create it again.
    """

    name: ClassVar[str] = "gitee"
    display_name: ClassVar[str] = "Gitee Releases"
    registry_name: ClassVar[str] = "gitee.com"
    config_model: ClassVar[type[GiteeConfig]] = GiteeConfig

    config: GiteeConfig

    def __init__(self, config: GiteeConfig, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self.client = HttpClient(config.api_url, session=self.session)
        self.state = GiteeState.START

    @property
    def repo_path(self) -> str:
        return f"repos/{self.config.owner}/{self.config.repo}"

    @property
    def auth(self) -> dict[str, str]:
        return {"access_token": self.config.token}

    def publish(self, request: ReleaseRequest) -> PublishOutcome:
        """Publish a Gitee release.

        Args:
            request: Release to publish (draft flag is ignored)

        Returns:
            PublishOutcome with the release id and asset outcomes

        Raises:
            FatalPhaseError: If the tag, release or release id phase fails
        """
        self.state = GiteeState.START
        self.info(
            f"Publishing {request.tag} to {self.config.owner}/{self.config.repo}"
        )
        if request.draft:
            self.detail("Gitee has no draft releases, the release will be published")

        self.reconcile_tag(request)
        self.create_release(request)
        release_id = self.lookup_release_id(request.tag)

        self.state = GiteeState.ASSETS_UPLOADING
        assets = self.upload_assets(release_id, request.assets)
        self.state = GiteeState.DONE

        return PublishOutcome.success(
            self.name,
            release_id=release_id,
            release_url=self.release_url(request.tag),
            assets=assets,
        )

    def release_url(self, tag: str) -> str:
        return (
            f"https://gitee.com/{self.config.owner}/{self.config.repo}"
            f"/releases/tag/{quote(tag, safe='')}"
        )

    def check_tag(self, tag: str) -> ProbeResult:
        """Probe a tag by name."""
        self.detail(f"Checking if tag {tag} exists")
        return probe(
            lambda: self.client.get(
                f"{self.repo_path}/tags/{quote(tag, safe='')}",
                params=self.auth,
                timeout=self.timeouts.probe,
            )
        )

    def reconcile_tag(self, request: ReleaseRequest) -> ReconcileAction:
        """Phase A: make sure the tag exists.

        Returns:
            FOUND if the tag existed, CREATED if it was created

        Raises:
            FatalPhaseError: If the probe fails with anything but 404, or
                tag creation fails
        """

        def create() -> dict[str, Any]:
            self.warn(
                f"Tag {request.tag} not found, creating it at {request.target_commitish}"
            )
            response = self.client.post(
                f"{self.repo_path}/tags",
                data={
                    **self.auth,
                    "tag_name": request.tag,
                    "refs": request.target_commitish,
                },
                timeout=self.timeouts.create,
            )
            return json_body(response)

        reconciled = probe_then_create(
            platform=self.name,
            phase=Phase.TAG.value,
            resource=f'tag "{request.tag}"',
            check=lambda: self.check_tag(request.tag),
            create=create,
            retries=self.config.probe_retries,
            retry_delay=self.config.probe_retry_delay,
        )
        if reconciled.action == ReconcileAction.FOUND:
            self.state = GiteeState.TAG_FOUND
            self.detail(f"Tag {request.tag} already exists, skipping tag creation")
        else:
            self.state = GiteeState.TAG_CREATED
            self.info(f"Created tag {request.tag}")
        return reconciled.action

    def create_release(self, request: ReleaseRequest) -> None:
        """Phase B: create the release.

        Raises:
            FatalPhaseError: If Gitee rejects the release
        """
        self.info(f'Creating release "{request.name}" for tag {request.tag}')
        try:
            self.client.post(
                f"{self.repo_path}/releases",
                params=self.auth,
                data={
                    "tag_name": request.tag,
                    "name": request.name,
                    "body": request.body,
                    "prerelease": str(request.prerelease).lower(),
                    "target_commitish": request.target_commitish,
                },
                timeout=self.timeouts.create,
            )
        except HttpError as e:
            raise self.fatal(
                Phase.RELEASE,
                f'Failed to create release "{request.name}"',
                cause=e,
            ) from e
        self.state = GiteeState.RELEASE_CREATED

    def lookup_release_id(self, tag: str) -> str:
        """Phase C: fetch the id of the release for a tag.

        Raises:
            FatalPhaseError: If the lookup fails or returns no id
        """
        self.detail(f"Retrieving release id for tag {tag}")
        try:
            response = self.client.get(
                f"{self.repo_path}/releases/tags/{quote(tag, safe='')}",
                params=self.auth,
                timeout=self.timeouts.probe,
            )
        except HttpError as e:
            raise self.fatal(
                Phase.RELEASE_ID,
                f"Failed to retrieve release id for tag {tag}",
                cause=e,
            ) from e

        release_id = json_body(response).get("id")
        if release_id is None or release_id == "":
            raise self.fatal(
                Phase.RELEASE_ID,
                f"Gitee returned no release id for tag {tag}",
                details=(response.text or "")[:200],
            )
        self.state = GiteeState.RELEASE_ID_RESOLVED
        self.detail(f"Release id for tag {tag}: {release_id}")
        return str(release_id)

    def upload_asset(self, release_id: str, info: FileInfo) -> None:
        """Phase D: attach one file to the release.

        Raises:
            AssetError: If the upload is rejected or times out
        """
        self.detail(f"Uploading {info.name} ({info.size} bytes) to release {release_id}")
        try:
            self.client.post(
                f"{self.repo_path}/releases/{release_id}/attach_files",
                data=self.auth,
                files={"file": (info.name, info.content)},
                timeout=self.timeouts.upload,
            )
        except HttpError as e:
            raise AssetError(
                f"Failed to upload {info.name}",
                asset=info.name,
                cause=e,
            ) from e
