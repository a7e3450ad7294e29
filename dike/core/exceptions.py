"""HTTP-mapped application errors.

Raised from services and routes; FastAPI renders them as ``{"detail": ...}``.
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str) -> None:
        super().__init__(status_code=self.status_code, detail=detail)


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConfigurationError(AppError):
    """Server is missing configuration it needs (e.g. the provider API key)."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class UpstreamError(AppError):
    """The AI provider could not be reached or returned an unusable reply."""

    status_code = status.HTTP_502_BAD_GATEWAY
