"""
Domain errors raised by the service layer and the authentication gate.

Every error carries a stable `code`, a client-safe `message` and the HTTP
status the API layer answers with. Nothing in here leaks internal detail.
"""

from fastapi import status


class ServiceError(Exception):
    """Base class for expected, client-reportable failures."""

    code = "Internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class InternalError(ServiceError):
    pass


class ConflictError(ServiceError):
    code = "Conflict"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Conflicting record"


class EmailAlreadyExistsError(ConflictError):
    code = "EmailExists"
    default_message = "User already exists with this email."


class UnauthorizedError(ServiceError):
    code = "Unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class MissingTokenError(UnauthorizedError):
    code = "MissingToken"
    default_message = "Authorization token is required"


class InvalidTokenError(UnauthorizedError):
    code = "InvalidToken"
    default_message = "Invalid JWT Token"


class InvalidCredentialsError(ServiceError):
    code = "InvalidCredentials"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid email or password"


class NotFoundError(ServiceError):
    code = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class UserNotFoundError(NotFoundError):
    code = "UserNotFound"
    default_message = "User not found"


class TodoNotFoundError(NotFoundError):
    code = "TodoNotFound"
    default_message = "Todo not found"
