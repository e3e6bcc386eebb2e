"""Utility modules for release-sync."""

from release_sync.utils.http import (
    USER_AGENT,
    HttpClient,
    HttpError,
    json_body,
    strip_query,
)

__all__ = [
    "USER_AGENT",
    "HttpClient",
    "HttpError",
    "json_body",
    "strip_query",
]
