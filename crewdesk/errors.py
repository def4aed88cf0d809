"""Domain errors raised by services and translated to HTTP responses in main.py."""

from __future__ import annotations


class DomainError(Exception):
    status_code = 500
    default_detail = "Internal error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationFailed(DomainError):
    status_code = 400
    default_detail = "Invalid request"


class InvalidToken(DomainError):
    status_code = 400
    default_detail = "Invalid or expired token"


class Unauthorized(DomainError):
    status_code = 401
    default_detail = "Not authenticated"


class Forbidden(DomainError):
    status_code = 403
    default_detail = "Forbidden"


class NotFound(DomainError):
    status_code = 404
    default_detail = "Not found"


class Conflict(DomainError):
    status_code = 409
    default_detail = "Duplicate record"


class UsernameGenerationExhausted(DomainError):
    """Every candidate username collided. Internal retry policy, not caller error."""

    status_code = 500
    default_detail = "Failed to generate unique username"


class EncryptionKeyError(RuntimeError):
    """Recovery key missing or malformed. Surfaces as a generic server failure."""
