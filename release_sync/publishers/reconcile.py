"""Check-then-create reconciliation of platform resources.

Platforms differ in which sub-resources can be probed before creation.
probe_then_create() expresses both cases:

- With a probe: Found skips creation, NotFound creates, Error is fatal
  (an ambiguous probe must never lead to a duplicate resource).
- Without a probe: creation is attempted directly, and the platform's
  duplicate error is either fatal or, when allowed, a signal to look the
  existing resource up and reuse it.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import requests

from release_sync.exceptions import FatalPhaseError
from release_sync.utils.http import HttpError, json_body

# Multiplier applied to the retry delay after each failed probe
BACKOFF_FACTOR = 2.0


class ProbeStatus(Enum):
    """Three-way answer of an existence probe."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass
class ProbeResult:
    """Result of an existence probe.

    Attributes:
        status: Found, NotFound or Error
        data: Decoded body of a Found response
        error: Cause of an Error result
    """

    status: ProbeStatus
    data: dict[str, Any] = field(default_factory=dict)
    error: HttpError | None = None

    @classmethod
    def found(cls, data: dict[str, Any] | None = None) -> "ProbeResult":
        return cls(status=ProbeStatus.FOUND, data=dict(data or {}))

    @classmethod
    def not_found(cls) -> "ProbeResult":
        return cls(status=ProbeStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: HttpError) -> "ProbeResult":
        return cls(status=ProbeStatus.ERROR, error=error)


def probe(call: Callable[[], requests.Response]) -> ProbeResult:
    """Run an HTTP existence check and classify the answer.

    Only HTTP 404 means "not found"; every other failure, including
    timeouts, is an Error result.
    """
    try:
        response = call()
    except HttpError as e:
        if e.is_not_found:
            return ProbeResult.not_found()
        return ProbeResult.failed(e)
    return ProbeResult.found(json_body(response))


class ReconcileAction(Enum):
    """How a reconciled resource was obtained."""

    FOUND = "found"
    CREATED = "created"
    REUSED = "reused"


@dataclass
class Reconciled:
    """A resource that exists after reconciliation."""

    action: ReconcileAction
    data: dict[str, Any] = field(default_factory=dict)


def probe_then_create(
    *,
    platform: str,
    phase: str,
    resource: str,
    create: Callable[[], dict[str, Any]],
    check: Callable[[], ProbeResult] | None = None,
    retries: int = 0,
    retry_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
    is_duplicate: Callable[[HttpError], bool] | None = None,
    reuse: Callable[[], dict[str, Any]] | None = None,
) -> Reconciled:
    """Make sure a resource exists without creating it twice.

    Args:
        platform: Platform name for error reporting
        phase: Phase name for error reporting
        resource: Human readable resource description, e.g. 'tag "v1.0.0"'
        create: Creates the resource, returns the decoded response body
        check: Existence probe; None when the platform has none
        retries: Extra probe attempts after a transport error (no response)
        retry_delay: Seconds to wait before the first retry; doubles after
            each further attempt
        sleep: Wait function, time.sleep by default
        is_duplicate: Recognizes the platform's "already exists" error on
            create; only consulted when there is no probe
        reuse: Fetches the existing resource after a duplicate error

    Returns:
        Reconciled resource and how it was obtained

    Raises:
        FatalPhaseError: On a probe error, a failed creation, or a
            duplicate error that may not be reused
    """
    if check is not None:
        result = check()
        attempts = 0
        while (
            result.status == ProbeStatus.ERROR
            and result.error is not None
            and result.error.is_transport_error
            and attempts < retries
        ):
            sleep(retry_delay * BACKOFF_FACTOR**attempts)
            attempts += 1
            result = check()

        if result.status == ProbeStatus.FOUND:
            return Reconciled(ReconcileAction.FOUND, result.data)
        if result.status == ProbeStatus.ERROR:
            raise FatalPhaseError(
                f"Could not determine whether {resource} exists",
                platform=platform,
                phase=phase,
                cause=result.error,
                fix_hint="Check credentials and connectivity, then rerun; "
                "nothing was created",
            )

    try:
        return Reconciled(ReconcileAction.CREATED, create())
    except HttpError as e:
        create_error = e

    if check is None and reuse is not None and is_duplicate and is_duplicate(create_error):
        try:
            return Reconciled(ReconcileAction.REUSED, reuse())
        except HttpError as e:
            raise FatalPhaseError(
                f"{resource} already exists but could not be fetched",
                platform=platform,
                phase=phase,
                cause=e,
            ) from e

    raise FatalPhaseError(
        f"Failed to create {resource}",
        platform=platform,
        phase=phase,
        cause=create_error,
    ) from create_error
