"""
Exception hierarchy for the travel sourcing pipeline.

Exception Hierarchy:
    TravelSourcingError (base)
    ├── ValidationError
    ├── NormalizationError
    └── ProviderError
        ├── ProviderAuthError
        ├── ProviderRateLimitError
        └── ProviderQuotaError

Only ValidationError escapes TravelAggregator.search(). Provider errors are
caught at the fan-out boundary and recorded as provider status snapshots;
normalization errors are caught per record.

Usage:
    from travel_sourcing.exceptions import ProviderError

    raise ProviderError("Upstream timeout", provider="skyscanner")
"""

from typing import Any, Dict, Optional


class TravelSourcingError(Exception):
    """
    Base exception for all travel sourcing errors.

    Attributes:
        message: Human-readable error message
        detail: Optional dict with additional error context
    """

    def __init__(self, message: str, *, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for JSON serialization."""
        result = {
            "error": self.__class__.__name__,
            "message": self.message,
        }
        if self.detail:
            result["detail"] = self.detail
        return result


class ValidationError(TravelSourcingError):
    """
    Raised when a search query is malformed.

    Examples:
        raise ValidationError("destination is required")
        raise ValidationError("origin is required", detail={"field": "origin"})
    """


class NormalizationError(TravelSourcingError):
    """Raised when a raw provider record declares an unrecognized offer kind."""

    def __init__(
        self,
        message: str,
        *,
        detail: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
    ):
        if source and detail is None:
            detail = {"source": source}
        elif source and detail:
            detail["source"] = source
        super().__init__(message, detail=detail)


class ProviderError(TravelSourcingError):
    """
    Raised by a provider adapter on transport, auth or rate-limit failure.

    Adapters must return an empty list for "no results" instead of raising.
    """

    status = "error"

    def __init__(
        self,
        message: str,
        *,
        detail: Optional[Dict[str, Any]] = None,
        provider: Optional[str] = None,
    ):
        if provider and detail is None:
            detail = {"provider": provider}
        elif provider and detail:
            detail["provider"] = provider
        super().__init__(message, detail=detail)
        self.provider = provider


class ProviderAuthError(ProviderError):
    """Provider rejected our credentials (HTTP 401/403)."""

    status = "unauthorized"


class ProviderRateLimitError(ProviderError):
    """
    Provider throttled the request (HTTP 429).

    Examples:
        raise ProviderRateLimitError("Too many requests", provider="agoda", retry_after=30)
    """

    status = "rate_limited"

    def __init__(
        self,
        message: str,
        *,
        detail: Optional[Dict[str, Any]] = None,
        provider: Optional[str] = None,
        retry_after: Optional[int] = None,
    ):
        if retry_after and detail is None:
            detail = {"retry_after": retry_after}
        elif retry_after and detail:
            detail["retry_after"] = retry_after
        super().__init__(message, detail=detail, provider=provider)
        self.retry_after = retry_after


class ProviderQuotaError(ProviderError):
    """Provider quota exhausted (HTTP 402)."""

    status = "exhausted"
