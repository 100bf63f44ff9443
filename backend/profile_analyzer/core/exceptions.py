"""Domain errors raised by the analyzer core.

Every error carries a stable ``kind`` string and the HTTP status the API
layer reports for it. The service layer never retries; it annotates the
first failure with the username and elapsed time and re-raises it.
"""
from typing import Optional


class AnalyzerError(Exception):
    """Base class for all analyzer failures."""

    kind: str = "internal_error"
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.username: Optional[str] = None
        self.duration_ms: Optional[int] = None

    def annotate(self, username: Optional[str], duration_ms: int) -> "AnalyzerError":
        """Attach request context for logging and return self."""
        self.username = username
        self.duration_ms = duration_ms
        return self

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class NotFoundError(AnalyzerError):
    """Unknown username, or no analysis stored for a known username."""

    kind = "not_found"
    status_code = 404


class RateLimitedError(AnalyzerError):
    """GitHub refused the request because of rate limiting."""

    kind = "rate_limited"
    status_code = 429

    def __init__(self, message: str, retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after


class UnauthorizedError(AnalyzerError):
    """The configured GitHub credential was rejected."""

    kind = "unauthorized"
    status_code = 401


class UpstreamError(AnalyzerError):
    """Any other GitHub failure. Carries the upstream status."""

    kind = "upstream_error"

    def __init__(self, message: str, upstream_status: int):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.status_code = upstream_status if upstream_status >= 400 else 502

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["upstream_status"] = self.upstream_status
        return data


class StorageError(AnalyzerError):
    """A persistence operation failed."""

    kind = "storage_error"
    status_code = 500


class ValidationError(AnalyzerError):
    """Malformed input rejected before reaching the core."""

    kind = "validation_error"
    status_code = 400
