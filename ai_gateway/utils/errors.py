"""Custom exception hierarchy for the AI gateway.

All gateway exceptions inherit from :class:`GatewayError`, which carries an
optional ``provider_name`` so handlers can tell which external service
(e.g. "openai", "ai-endpoint", "files-api") caused the failure.

    GatewayError  (base -- catch-all for any gateway error)
    +-- LLMError                 (remote generation call failed / bad payload)
    +-- RateLimitError           (HTTP 429 or provider rate-limit signal)
    +-- ProviderUnavailableError (external service down / unreachable)
    +-- ConfigurationError       (startup / missing config)
    +-- FileContextError         (supporting-file lookup failed)

The response cache never wraps these: whatever a producer raises reaches
every caller waiting on that key as the same exception object, so callers
can still tell a ``RateLimitError`` apart from a generic ``LLMError``.
"""


class GatewayError(Exception):
    """Base exception for all gateway errors.

    ``__str__`` prefixes the provider name in brackets for log scanning,
    e.g. ``[openai] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Remote generation errors
# ---------------------------------------------------------------------------

class LLMError(GatewayError):
    """Raised when a generation call fails or returns an unparseable response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(GatewayError):
    """Raised when the generation endpoint rejects a call for rate limiting.

    Kept separate from :class:`LLMError` so callers never misreport a 429
    as a generic failure, and so services can skip mock fallbacks for it.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded. Please wait a moment before trying again.",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderUnavailableError(GatewayError):
    """Raised when an external service is unreachable (network / timeout)."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration / collaborator errors
# ---------------------------------------------------------------------------

class ConfigurationError(GatewayError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class FileContextError(GatewayError):
    """Raised when a project's supporting files cannot be fetched."""

    def __init__(
        self,
        message: str = "Supporting file lookup failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
