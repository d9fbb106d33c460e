"""Error taxonomy for generation, Google API and pipeline failures."""

from __future__ import annotations

from typing import Optional


class LandingSeoError(Exception):
    """Base class for every error raised by this package."""


# ── Text generation ───────────────────────────────────────────────────────


class ProviderError(LandingSeoError):
    """A single provider call failed.

    ``retryable`` marks transient failures (rate limits, overload, 5xx,
    dropped connections) that the retry policy should try again.
    """

    def __init__(self, message: str, status: Optional[int] = None, retryable: bool = False):
        super().__init__(message)
        self.status = status
        self.retryable = retryable


class GenerationFailed(LandingSeoError):
    """The provider kept failing until the retry policy gave up."""

    def __init__(self, last_error: BaseException, attempts: int):
        super().__init__(f"Text generation failed after {attempts} attempt(s): {last_error}")
        self.last_error = last_error
        self.attempts = attempts


class MalformedResponse(LandingSeoError):
    """The provider answered, but no structured payload could be parsed."""

    def __init__(self, content: str, reason: str = ""):
        preview = content[:200]
        super().__init__(f"Could not parse structured response ({reason}): {preview!r}")
        self.content = content
        self.reason = reason


# ── Google APIs ───────────────────────────────────────────────────────────


class CredentialsMissing(LandingSeoError):
    """No service-account credential is configured for a Google client."""


class TokenExchangeFailed(LandingSeoError):
    def __init__(self, status: int, body: str):
        super().__init__(f"Token request failed: {status} - {body}")
        self.status = status
        self.body = body


class UpstreamRequestFailed(LandingSeoError):
    """Non-2xx answer from a Google API; keeps status and body for diagnostics."""

    api_name = "Google API"

    def __init__(self, status: int, body: str):
        super().__init__(f"{self.api_name} error: {status} - {body}")
        self.status = status
        self.body = body

    @property
    def retryable(self) -> bool:
        return self.status == 429 or self.status >= 500


class IndexingRequestFailed(UpstreamRequestFailed):
    api_name = "Indexing API"


class AnalyticsRequestFailed(UpstreamRequestFailed):
    api_name = "Search Console API"


# ── Pipeline ──────────────────────────────────────────────────────────────


class UnitGenerationFailed(LandingSeoError):
    """One generation unit failed in ``phase``; wraps the underlying cause."""

    def __init__(self, unit, phase: str, cause: BaseException):
        label = getattr(unit, "business_type", unit)
        super().__init__(f"{label} failed during {phase}: {cause}")
        self.unit = unit
        self.phase = phase
        self.cause = cause
