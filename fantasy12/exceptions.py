"""Error taxonomy for the API.

Every error carries the HTTP status it maps to; the handlers installed in
``main.py`` render them as ``{"error": message}``.
"""
from typing import Optional


class ApiError(Exception):
    """Base exception for all API errors."""
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    """Malformed or missing input."""
    status_code = 400


class InsufficientFunds(ValidationError):
    """Raised when a user's chip balance cannot cover an operation."""
    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient chips. Required: {required}, available: {available}"
        )


class InsufficientInventory(ValidationError):
    """Raised when a user lacks the power-ups a ticket asks for."""
    def __init__(self, item: str, required: int, available: int):
        self.item = item
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient {item}. Required: {required}, available: {available}"
        )


class Unauthorized(ApiError):
    status_code = 401


class Forbidden(ApiError):
    status_code = 403


class NotFound(ApiError):
    status_code = 404


class Conflict(ApiError):
    status_code = 409


class RateLimited(ApiError):
    """Raised when a client exhausts a rate limit window."""
    status_code = 429

    def __init__(self, message: str, retry_after: int, headers: Optional[dict] = None):
        super().__init__(message)
        self.retry_after = retry_after
        self.headers = headers or {}


class Internal(ApiError):
    status_code = 500
