"""
Application error taxonomy. Every error carries a stable HTTP status and a human-readable message;
handlers in app.main render them as {"message": ..., "error": ...}.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"
    headers: dict[str, str] | None = None

    def __init__(self, message: str | None = None, *, error: str | None = None):
        self.message = message or self.message
        self.error = error
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.error is not None:
            body["error"] = self.error
        return body


class InvalidCredentials(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid credentials"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Not authenticated"
    headers = {"WWW-Authenticate": "Bearer"}


class NotFound(AppError):
    """Absent and not-owned are deliberately the same error."""
    status_code = status.HTTP_404_NOT_FOUND
    message = "Video not found"


class NoFilesProvided(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "No files uploaded"


class TooManyFiles(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Too many files"


class PayloadTooLarge(AppError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    message = "File too large"


class UnsupportedMediaType(AppError):
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    message = "Only video files are allowed"


class UserAlreadyExists(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "User already exists"


class FeatureDisabled(AppError):
    """Development-only routes answer as if they did not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not Found"


class MediaHostingError(AppError):
    message = "Media hosting request failed"


class UploadFailed(MediaHostingError):
    message = "Video upload failed"

    def __init__(self, filename: str, error: str | None = None):
        self.filename = filename
        super().__init__(f"Video upload failed: {filename}", error=error)


class DeleteFailed(MediaHostingError):
    message = "Failed to delete video"


class StorageError(AppError):
    message = "Database error"


class InternalError(AppError):
    pass


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)
