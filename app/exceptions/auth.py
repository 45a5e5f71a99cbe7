"""Authentication exceptions."""

from .base import BaseAppException, UnauthorizedError, ValidationError


class InvalidCredentialsError(UnauthorizedError):
    """Raised when email/password sign-in fails."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message=message, error_code="INVALID_EMAIL_OR_PASSWORD")


class UserAlreadyExistsError(ValidationError):
    """Raised when signing up with an email that is already registered."""

    def __init__(self, message: str = "User already exists"):
        super().__init__(message=message, error_code="USER_ALREADY_EXISTS")


class InvalidVerificationTokenError(BaseAppException):
    """Raised when an email verification token is unknown or expired."""

    def __init__(self, message: str = "Invalid or expired verification token"):
        super().__init__(message=message, status_code=400, error_code="INVALID_TOKEN")
