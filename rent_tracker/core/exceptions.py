from fastapi import HTTPException


class AppError(HTTPException):
    """Base for errors raised by services; FastAPI renders them as {"detail": ...}."""

    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None, headers: dict | None = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class ValidationError(AppError):
    status_code = 400
    default_detail = "Invalid request"


class NoMembersError(ValidationError):
    default_detail = "No members in this group to split expense"


class NotFoundError(AppError):
    status_code = 404
    default_detail = "Not found"


class ForbiddenError(AppError):
    status_code = 403
    default_detail = "You are not allowed to do this"


class AuthError(AppError):
    status_code = 401
    default_detail = "Could not validate credentials"

    def __init__(self, detail: str | None = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class InvalidCredentialError(AuthError):
    default_detail = "Invalid token."


class ExpiredCredentialError(InvalidCredentialError):
    default_detail = "Token expired."


class StaleSessionError(AuthError):
    default_detail = "Session expired due to server restart."


class StorageError(AppError):
    status_code = 500
    default_detail = "Internal server error"
