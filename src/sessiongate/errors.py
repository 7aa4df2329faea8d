from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class UnauthorizedError(UserError):
    """Raised when submitted credentials are rejected.

    The message never tells an unknown user apart from a wrong secret.
    """

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class UnauthenticatedError(UserError):
    """Raised when a request carries no valid session."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class CapacityError(Exception):
    """Raised when the session backend is unavailable.

    Retryable. Callers must not treat it as an authentication failure.
    """

    def __init__(self, message: str = "Session store unavailable", retry_after: int = 1) -> None:
        super().__init__(message)
        self.retry_after = retry_after
