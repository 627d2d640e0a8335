class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when credentials or access tokens are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class ConflictError(DomainError):
    """Raised when creating something that already exists."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class TokenNotFound(NotFoundError):
    pass


class SectionNotFound(NotFoundError):
    pass


class StudentNotFound(NotFoundError):
    pass


class CourseNotFound(NotFoundError):
    pass


class LecturerNotFound(NotFoundError):
    pass


class TokenExpired(DomainError):
    """The QR token exists but its validity window has passed.

    The token is kept on the exception so callers can report which
    course/session the stale code belonged to.
    """

    def __init__(self, message: str, token=None):
        super().__init__(message)
        self.token = token


class CourseMismatch(AuthorizationError):
    """The scanned token belongs to a different course than the section."""


class NotEnrolled(AuthorizationError):
    """The student is not enrolled where the operation requires it."""


class CannotOverrideScanned(AuthorizationError):
    """Scan-origin presence records cannot be removed by a manual override."""


class DuplicatePresenceError(DomainError):
    """Storage rejected a second presence row for the same student and session."""
