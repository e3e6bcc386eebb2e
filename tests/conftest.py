"""Pytest fixtures for release-sync tests.

Provides common fixtures for:
- Temporary directories
- A clean environment (no tokens or RELEASE_SYNC_* overrides leaking in)
- A scripted fake HTTP session that records every request
- Complete platform configurations
"""

import json
import os
from collections.abc import Callable, Generator
from http import HTTPStatus
from pathlib import Path
from typing import Any

import pytest
import requests

from release_sync.config.models import GiteeConfig, GitHubConfig, SyncConfig


@pytest.fixture
def temp_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary directory for tests.

    Yields:
        Path to temporary directory
    """
    yield tmp_path
    # Cleanup handled by pytest's tmp_path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove environment variables that feed configuration."""
    for key in list(os.environ):
        if key.startswith("RELEASE_SYNC_"):
            monkeypatch.delenv(key, raising=False)
    for key in ("GITHUB_TOKEN", "GITHUB_REPOSITORY", "GITEE_TOKEN"):
        monkeypatch.delenv(key, raising=False)


def build_response(
    status_code: int = 200,
    json_data: Any = None,
    text: str | None = None,
    url: str = "",
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    if json_data is not None:
        content = json.dumps(json_data).encode("utf-8")
    else:
        content = (text or "").encode("utf-8")
    response._content = content
    response.encoding = "utf-8"
    response.url = url
    try:
        response.reason = HTTPStatus(status_code).phrase
    except ValueError:
        response.reason = ""
    return response


class FakeSession:
    """Scripted stand-in for requests.Session.

    Routes are registered per method and URL suffix. Each route returns its
    results in order and keeps returning the last one. A result that is an
    exception is raised instead of returned. When several suffixes match a
    URL, the longest one wins. Unrouted requests fail the test.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[requests.Response | Exception]] = {}
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.closed = False

    def add(self, method: str, suffix: str, *results: requests.Response | Exception) -> None:
        if not results:
            raise ValueError("A route needs at least one result")
        self.routes[(method.upper(), suffix)] = list(results)

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append((method, url, kwargs))
        matches = [
            key for key in self.routes if key[0] == method.upper() and url.endswith(key[1])
        ]
        if not matches:
            raise AssertionError(f"Unexpected request: {method} {url}")
        key = max(matches, key=lambda k: len(k[1]))
        results = self.routes[key]
        result = results.pop(0) if len(results) > 1 else results[0]
        if isinstance(result, Exception):
            raise result
        return result

    def calls_to(self, method: str, suffix: str) -> list[tuple[str, str, dict[str, Any]]]:
        """Return recorded calls for a method whose URL ends with suffix."""
        return [
            call for call in self.calls if call[0] == method.upper() and call[1].endswith(suffix)
        ]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_session() -> FakeSession:
    """Create an empty scripted session."""
    return FakeSession()


@pytest.fixture
def make_response() -> Callable[..., requests.Response]:
    """Factory fixture for canned HTTP responses."""
    return build_response


@pytest.fixture
def github_config() -> GitHubConfig:
    """Complete GitHub configuration."""
    return GitHubConfig(token="gh-token", owner="octo", repo="app")


@pytest.fixture
def gitee_config() -> GiteeConfig:
    """Complete Gitee configuration."""
    return GiteeConfig(token="gitee-token", owner="octo", repo="app")


@pytest.fixture
def sync_config(github_config: GitHubConfig, gitee_config: GiteeConfig) -> SyncConfig:
    """Configuration with both platforms complete."""
    return SyncConfig(github=github_config, gitee=gitee_config)


@pytest.fixture
def asset_files(temp_dir: Path) -> list[Path]:
    """Create three small asset files.

    Returns:
        Absolute paths in creation order
    """
    paths = []
    for name, content in (
        ("app-linux.tar.gz", b"linux build"),
        ("app-macos.zip", b"macos build"),
        ("checksums.txt", b"abc123  app-linux.tar.gz\n"),
    ):
        path = temp_dir / name
        path.write_bytes(content)
        paths.append(path)
    return paths
