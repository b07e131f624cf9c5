"""Custom application exceptions."""

from enum import Enum


class AuthRejection(str, Enum):
    """Reason a login attempt was turned down."""

    INVALID_REQUEST = "invalid_request"
    ACCOUNT_NOT_FOUND = "account_not_found"
    NOT_AN_ADMIN = "not_an_admin"
    ADMIN_VIA_USER_FORM = "admin_via_user_form"
    MISSING_PASSWORD = "missing_password"
    INVALID_CREDENTIALS = "invalid_credentials"
    STORAGE_UNAVAILABLE = "storage_unavailable"


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class ConflictException(AppException):
    """Conflict exception."""

    def __init__(self, message: str = "Conflict"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


class ServiceUnavailableException(AppException):
    """Backing service unavailable exception."""

    def __init__(self, message: str = "Service unavailable"):
        """Initialize with 503 status code."""
        super().__init__(message, status_code=503)


# Login taxonomy. Each carries the rejection reason and the catalog key of
# the message shown to the caller.


class LoginValidationException(BadRequestException):
    """Identifier or password has the wrong shape; raised before resolution."""

    def __init__(
        self,
        message_key: str = "identifier_required",
        reason: AuthRejection = AuthRejection.INVALID_REQUEST,
    ):
        self.reason = reason
        self.message_key = message_key
        super().__init__(message_key)


class AccountNotFoundException(NotFoundException):
    """No account matches the identifier under the requested login mode."""

    reason = AuthRejection.ACCOUNT_NOT_FOUND

    def __init__(self, message_key: str = "user_not_found"):
        self.message_key = message_key
        super().__init__(message_key)


class RoleMismatchException(ForbiddenException):
    """Admin account through the user form, or user account through the admin form."""

    def __init__(self, reason: AuthRejection, message_key: str):
        self.reason = reason
        self.message_key = message_key
        super().__init__(message_key)


class InvalidCredentialsException(UnauthorizedException):
    """Admin password check failed."""

    reason = AuthRejection.INVALID_CREDENTIALS

    def __init__(self, message_key: str = "invalid_credentials"):
        self.message_key = message_key
        super().__init__(message_key)


class StorageUnavailableException(ServiceUnavailableException):
    """The account store could not be reached."""

    reason = AuthRejection.STORAGE_UNAVAILABLE

    def __init__(self, message_key: str = "storage_unavailable"):
        self.message_key = message_key
        super().__init__(message_key)


LOGIN_EXCEPTIONS = (
    LoginValidationException,
    AccountNotFoundException,
    RoleMismatchException,
    InvalidCredentialsException,
    StorageUnavailableException,
)
