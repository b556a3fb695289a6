from typing import Optional


class ServiceError(Exception):
    """Base class for service-layer failures that map onto HTTP responses.

    Each subclass carries the HTTP ``status_code`` and a stable ``error_code``
    that is rendered in the JSON error body:

    - validation_failed (400)
    - unauthorized / invalid_credentials (401)
    - not_found (404)
    - conflict (409)
    - server_fault (500)
    """

    status_code: int = 400
    error_code: str = "validation_failed"

    def __init__(self, message: str, *, detail: Optional[dict] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class ValidationFailed(ServiceError):
    """Missing or malformed input (400)."""
    status_code = 400
    error_code = "validation_failed"


class Unauthorized(ServiceError):
    """No usable session or token (401)."""
    status_code = 401
    error_code = "unauthorized"


class InvalidCredentials(Unauthorized):
    """Login rejected. The message never says which check failed."""
    error_code = "invalid_credentials"


class TokenExpired(Unauthorized):
    error_code = "token_expired"


class TokenInvalid(Unauthorized):
    error_code = "token_invalid"


class NotFound(ServiceError):
    """Missing, or owned by someone else (404)."""
    status_code = 404
    error_code = "not_found"


class Conflict(ServiceError):
    """Uniqueness violation (409)."""
    status_code = 409
    error_code = "conflict"


class ServerFault(ServiceError):
    """Unexpected store or provider failure (500)."""
    status_code = 500
    error_code = "server_fault"


__all__ = [
    "ServiceError",
    "ValidationFailed",
    "Unauthorized",
    "InvalidCredentials",
    "TokenExpired",
    "TokenInvalid",
    "NotFound",
    "Conflict",
    "ServerFault",
]
