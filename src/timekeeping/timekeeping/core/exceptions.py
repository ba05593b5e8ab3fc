class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    status_code = 400


class TimeMathError(DomainError):
    """Raised by the time math helpers; services re-raise as ValidationError."""


class InvalidTimeFormat(TimeMathError):
    pass


class InvalidTimeRange(TimeMathError):
    pass


class InvalidBreak(TimeMathError):
    pass


class InvalidRoundingMode(TimeMathError):
    pass


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or no identity is present."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    """Raised when a record is missing, or present but of the wrong type."""

    status_code = 404


class ConflictError(DomainError):
    """Raised on illegal state transitions and overlapping intervals."""

    status_code = 409
