"""Error kinds raised by the pricing engine.

Callers map these to transport status codes; the service layer never
translates one kind into another.
"""
from typing import Any, Optional


class QuoteCraftError(Exception):
    code: str = "error"
    status_code: int = 500

    def __init__(self, reason: str, message: Optional[str] = None):
        self.reason = str(reason)
        self.message = message or self.reason
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "success": False,
            "error": self.code,
            "reason": self.reason,
            "message": self.message,
        }


class QuoteInvalid(QuoteCraftError):
    """Caller-facing input error; retrying the same request cannot help."""

    code = "quote_invalid"
    status_code = 400


class DistanceUnavailable(QuoteCraftError):
    """The map provider refused the lookup (quota). Retryable after a backoff."""

    code = "distance_unavailable"
    status_code = 503

    def __init__(
        self,
        reason: str,
        message: Optional[str] = None,
        request: Optional[dict[str, Any]] = None,
        retry_after: int = 60,
    ):
        super().__init__(reason, message)
        self.request = request
        self.retry_after = retry_after

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["retryAfter"] = self.retry_after
        if self.request is not None:
            body["request"] = self.request
        return body


class ConfigInvalid(QuoteCraftError):
    code = "config_invalid"
    status_code = 400


class InternalError(QuoteCraftError):
    code = "internal_error"
    status_code = 500

    def __init__(self, correlation_id: str, message: str = "Unexpected error"):
        super().__init__("internal_error", message)
        self.correlation_id = correlation_id

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["correlationId"] = self.correlation_id
        return body
