"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    BAD_CREDENTIAL = "BAD_CREDENTIAL"
    IDENTITY_NOT_FOUND = "IDENTITY_NOT_FOUND"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"

    # Not found errors (404)
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_ROLE = "INVALID_ROLE"

    # Conflict errors (409)
    ALREADY_EXISTS = "ALREADY_EXISTS"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500/503)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    IDENTITY_UNAVAILABLE = "IDENTITY_UNAVAILABLE"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class AuthorizationError(AppException):
    """Authorization failed."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


class InvalidRequestError(AppException):
    """A required input is missing or malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_REQUEST,
            message=message,
            status_code=400,
            details={"field": field} if field else None,
        )


class InvalidRoleError(AppException):
    """Role is not in the allow-list."""

    def __init__(self, role: str, allowed: list[str]) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_ROLE,
            message=f"Invalid role value: {role}",
            status_code=400,
            details={"role": role, "allowed": allowed},
        )


class ProfileNotFoundError(AppException):
    """No profile stored for the identifier."""

    def __init__(self, uid: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_NOT_FOUND,
            message=f"Profile not found: {uid}",
            status_code=404,
            details={"uid": uid},
        )


class StoreUnavailableError(AppException):
    """The profile store could not be reached or failed.

    The message is deliberately generic; the cause is only logged.
    """

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.STORE_UNAVAILABLE,
            message="Profile store is temporarily unavailable",
            status_code=503,
        )


class IdentityUnavailableError(AppException):
    """The identity provider could not be reached or failed."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.IDENTITY_UNAVAILABLE,
            message="Identity provider is temporarily unavailable",
            status_code=503,
        )


class IdentityAlreadyExistsError(AppException):
    """An identity is already registered for the email."""

    def __init__(self, email: str) -> None:
        super().__init__(
            error_code=ErrorCode.ALREADY_EXISTS,
            message="This email is already registered. Please sign in instead.",
            status_code=409,
            details={"email": email},
        )


class IdentityNotFoundError(AppException):
    """No identity is registered for the email."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.IDENTITY_NOT_FOUND,
            message="No account found with this email.",
            status_code=401,
        )


class BadCredentialError(AppException):
    """Credentials were rejected by the identity provider."""

    def __init__(self, message: str = "Invalid email or password.") -> None:
        super().__init__(
            error_code=ErrorCode.BAD_CREDENTIAL,
            message=message,
            status_code=401,
        )
