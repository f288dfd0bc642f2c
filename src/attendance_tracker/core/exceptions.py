class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class EnrollmentBlockError(ValidationError):
    """Raised when a student tries to enroll across different blocks."""


class AssistantError(DomainError):
    """Raised when the completion API call fails."""
