"""
Base domain errors shared by every bounded context.

All errors raised from the domain and application layers derive from
DomainError. They are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""


class DomainError(Exception):
    """Base error for all domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class ValidationError(DomainError):
    """Raised when input is missing or malformed beyond schema validation."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(DomainError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(f"{resource} not found: {identifier}")
        self.resource = resource
        self.identifier = identifier


class UnauthorizedError(DomainError):
    """Raised when a caller is not authenticated."""


class ForbiddenError(DomainError):
    """Raised when an authenticated caller may not perform an action."""


class ConflictError(DomainError):
    """Raised when an action conflicts with the current resource state."""


class DuplicateError(ConflictError):
    """Raised when a unique value is already taken."""

    def __init__(self, resource: str, field: str) -> None:
        super().__init__(f"{resource} with this {field} already exists")
        self.resource = resource
        self.field = field


class InvalidStatusTransitionError(ConflictError):
    """Raised when a status machine is asked for a forbidden transition."""

    def __init__(self, resource: str, current: str, requested: str) -> None:
        super().__init__(
            f"{resource} cannot move from '{current}' to '{requested}'"
        )
        self.resource = resource
        self.current = current
        self.requested = requested


class ExternalServiceError(DomainError):
    """Raised when an external collaborator (market data, storage) fails."""

    def __init__(self, service: str, reason: str) -> None:
        super().__init__(f"{service} unavailable: {reason}")
        self.service = service
        self.reason = reason
