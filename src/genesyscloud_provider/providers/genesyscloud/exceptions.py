from typing import Any, Dict, Optional

import httpx


class APIError(Exception):
    """Base exception for Genesys Cloud API errors."""
    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None,
                 correlation_id: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.correlation_id = correlation_id
        self.details = details

    def __str__(self) -> str:
        parts = [f"API Error ({self.status_code}): {self.message}" if self.status_code else self.message]
        if self.code:
            parts.append(f"code={self.code}")
        if self.correlation_id:
            parts.append(f"correlationId={self.correlation_id}")
        return " ".join(parts)


class NotFoundError(APIError):
    """Raised when the requested object does not exist."""
    pass


class AuthenticationError(APIError):
    """Raised when OAuth credentials are rejected."""
    pass


class AuthorizationError(APIError):
    """Raised when the client lacks the permission for an operation."""
    pass


class BadRequestError(APIError):
    """Raised when the API rejects a request body or parameters."""
    pass


class ConflictError(APIError):
    """Raised when an update conflicts with the object's current version."""
    pass


class RateLimitError(APIError):
    """Raised when the API throttles the client."""
    def __init__(self, message: str, retry_after: Optional[float] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(APIError):
    """Raised on 5xx responses."""
    pass


class TransportError(APIError):
    """Raised when the API cannot be reached."""
    pass


def _retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


def convert_http_error(response: httpx.Response) -> APIError:
    """Convert an error response to the appropriate API exception."""
    body: Dict[str, Any] = {}
    try:
        parsed = response.json()
        if isinstance(parsed, dict):
            body = parsed
    except ValueError:
        pass

    message = body.get("message") or response.text or response.reason_phrase
    kwargs: Dict[str, Any] = {
        "status_code": response.status_code,
        "code": body.get("code"),
        "correlation_id": body.get("contextId") or response.headers.get("ININ-Correlation-Id"),
        "details": body.get("details") or body.get("errors"),
    }

    status = response.status_code
    if status == 400:
        return BadRequestError(message, **kwargs)
    elif status == 401:
        return AuthenticationError(message, **kwargs)
    elif status == 403:
        return AuthorizationError(message, **kwargs)
    elif status == 404:
        return NotFoundError(message, **kwargs)
    elif status == 409:
        return ConflictError(message, **kwargs)
    elif status == 429:
        return RateLimitError(message, retry_after=_retry_after(response), **kwargs)
    elif status >= 500:
        return ServerError(message, **kwargs)

    return APIError(message, **kwargs)


def is_status_404(error: Optional[BaseException]) -> bool:
    """Check whether an error means the object does not exist."""
    return isinstance(error, APIError) and error.status_code == 404
