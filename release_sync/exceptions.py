"""Custom exception hierarchy for release-sync.

Exit codes follow Unix conventions:
- 1: General error
- 2: Configuration error
- 5: Fatal publish phase error
- 6: Asset error (never escapes a publisher run)
"""


class ReleaseSyncError(Exception):
    """Base exception for all release-sync errors.

    Each subclass defines an exit_code for CLI error reporting.
    """

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        details: str | None = None,
        fix_hint: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Brief error message
            details: Detailed explanation of what went wrong
            fix_hint: Suggested command or action to fix the issue
        """
        super().__init__(message)
        self.message = message
        self.details = details
        self.fix_hint = fix_hint

    def __str__(self) -> str:
        parts = [self.message]
        if self.details:
            parts.append(f"\nDetails: {self.details}")
        if self.fix_hint:
            parts.append(f"\nFix: {self.fix_hint}")
        return "".join(parts)


class ConfigurationError(ReleaseSyncError):
    """Pre-flight configuration errors.

    Raised before any network call when:
    - A requested platform is not supported
    - Required credential or identity fields are missing
    - The config file has invalid syntax or values
    - The release tag or name is empty
    """

    exit_code = 2


class FatalPhaseError(ReleaseSyncError):
    """A publisher phase failed and the run must stop.

    Raised when a tag probe fails for any reason other than "not found",
    or when tag creation, release creation or the release id lookup fails.
    Stops the current platform and every platform requested after it.
    """

    exit_code = 5

    def __init__(
        self,
        message: str,
        *,
        platform: str,
        phase: str,
        cause: BaseException | None = None,
        details: str | None = None,
        fix_hint: str | None = None,
    ) -> None:
        if details is None and cause is not None:
            details = str(cause)
        super().__init__(f"[{platform}:{phase}] {message}", details=details, fix_hint=fix_hint)
        self.platform = platform
        self.phase = phase
        self.cause = cause


class AssetError(ReleaseSyncError):
    """A single asset could not be uploaded.

    Recovered inside the publisher's upload loop and recorded as a failed
    asset outcome; sibling assets are still processed.
    """

    exit_code = 6

    def __init__(
        self,
        message: str,
        *,
        asset: str,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, details=str(cause) if cause is not None else None)
        self.asset = asset
        self.cause = cause
