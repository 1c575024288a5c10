"""Exception hierarchy for the watcher pipeline.

All exceptions inherit from WatcherError so the CLI can catch every
pipeline-related failure in a single except block:

- ConfigurationError: missing or invalid configuration, raised before any I/O
- CatalogAPIError: failures talking to the HackerOne catalog API
  - RetryableAPIError: transient (429, 5xx, network), retried with backoff
  - PermanentAPIError: fatal on first occurrence, never retried

Notification and recon dispatch failures are not modelled as exceptions:
those services convert every failure into a boolean result.
"""

from typing import Iterable, Optional


class WatcherError(Exception):
    """Base exception for all watcher errors."""

    pass


class ConfigurationError(WatcherError):
    """Configuration is missing or invalid.

    Fatal, never retried. Always raised before any network call.
    """

    pass


class ConfigValidationError(ConfigurationError):
    """Settings failed pydantic validation or the config file is unreadable."""

    pass


class MissingCredentialsError(ConfigurationError):
    """Required catalog credentials are not set.

    The message names every missing variable at once so the operator can fix
    the environment in a single pass.
    """

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"Missing required environment variables: {', '.join(self.missing)}. "
            "Set these in your .env file or repository secrets."
        )


class CatalogAPIError(WatcherError):
    """HackerOne catalog request failed.

    Attributes:
        status_code: HTTP status of the failing response, None for
            network-level failures.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RetryableAPIError(CatalogAPIError):
    """Base for transient failures that may succeed on retry."""

    pass


class RateLimitError(RetryableAPIError):
    """API returned 429 Too Many Requests."""

    pass


class ServerError(RetryableAPIError):
    """API returned a 5xx status."""

    pass


class ConnectionFailedError(RetryableAPIError):
    """Network-level failure (connection refused, reset, timeout).

    The underlying aiohttp or asyncio error is chained as ``__cause__``.
    """

    pass


class PermanentAPIError(CatalogAPIError):
    """Non-retryable API failure (unexpected 4xx and similar)."""

    pass


class AuthenticationError(PermanentAPIError):
    """API rejected the credentials (401/403)."""

    pass


class MalformedResponseError(PermanentAPIError):
    """Response body was not the expected JSON envelope."""

    pass


class PaginationLimitError(PermanentAPIError):
    """Server kept returning a next-page link past the configured ceiling."""

    pass
