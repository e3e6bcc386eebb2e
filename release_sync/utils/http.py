"""HTTP transport utilities.

Thin wrapper around a requests session with:
- An explicit timeout on every call (no implicit defaults)
- A common User-Agent and Accept header
- HttpError carrying status code and a truncated body on failure
- Query strings stripped from error URLs so tokens never reach the console
"""

from typing import Any

import requests

USER_AGENT = "Release Sync"

# Maximum number of response body characters kept on an HttpError
BODY_PREVIEW_LIMIT = 500


class HttpError(Exception):
    """Exception raised when an HTTP call fails.

    Attributes:
        method: HTTP method of the failed call
        url: Request URL without its query string
        status_code: HTTP status, or None for transport failures (timeouts,
            refused connections, DNS errors)
        body: Response body preview (empty for transport failures)
        reason: Transport error description or HTTP reason phrase
    """

    def __init__(
        self,
        method: str,
        url: str,
        status_code: int | None,
        body: str = "",
        reason: str = "",
    ) -> None:
        self.method = method
        self.url = strip_query(url)
        self.status_code = status_code
        self.body = body[:BODY_PREVIEW_LIMIT]
        self.reason = reason
        super().__init__(f"{method} {self.url} failed")

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_transport_error(self) -> bool:
        """True when no HTTP response was received at all."""
        return self.status_code is None

    def __str__(self) -> str:
        if self.status_code is None:
            return f"{self.method} {self.url} failed: {self.reason or 'no response'}"
        parts = [f"{self.method} {self.url} returned HTTP {self.status_code}"]
        if self.reason:
            parts.append(f" {self.reason}")
        if self.body:
            parts.append(f": {self.body}")
        return "".join(parts)


def strip_query(url: str) -> str:
    """Drop the query string (and any credentials in it) from a URL."""
    return url.split("?", 1)[0]


def json_body(response: requests.Response) -> dict[str, Any]:
    """Decode a JSON object body, returning an empty dict for anything else."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class HttpClient:
    """Session-backed client for one platform API.

    Relative paths are joined onto base_url; absolute URLs (such as upload
    URLs returned by an API) are used as-is.
    """

    def __init__(
        self,
        base_url: str,
        *,
        headers: dict[str, str] | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if headers:
            self.headers.update(headers)

    def url_for(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        *,
        timeout: float,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> requests.Response:
        """Send a request and return the response if it is 2xx.

        Args:
            method: HTTP method
            path: Path relative to base_url, or an absolute URL
            timeout: Timeout in seconds for this call
            headers: Extra headers merged over the client defaults
            **kwargs: Passed through to requests (params, json, data, files)

        Returns:
            The successful response

        Raises:
            HttpError: On a non-2xx status or any transport failure
        """
        url = self.url_for(path)
        merged_headers = {**self.headers, **(headers or {})}

        try:
            response = self.session.request(
                method,
                url,
                headers=merged_headers,
                timeout=timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise HttpError(method, url, None, reason=f"{type(e).__name__}: {e}") from e

        if not 200 <= response.status_code < 300:
            raise HttpError(
                method,
                url,
                response.status_code,
                body=response.text or "",
                reason=response.reason or "",
            )
        return response

    def get(self, path: str, *, timeout: float, **kwargs: Any) -> requests.Response:
        return self.request("GET", path, timeout=timeout, **kwargs)

    def post(self, path: str, *, timeout: float, **kwargs: Any) -> requests.Response:
        return self.request("POST", path, timeout=timeout, **kwargs)

    def close(self) -> None:
        self.session.close()
