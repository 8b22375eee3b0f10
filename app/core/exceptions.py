"""Error taxonomy shared by the auth layer and the request handlers.

Every error carries the HTTP status it maps to; the handlers registered in
``app.api.errors`` render it as ``{"error": <message>}``.
"""

from fastapi import status


class ApiError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "No token provided"


class InvalidToken(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid Token"


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Akses ditolak"


class InvalidInput(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Input tidak valid"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Data tidak ditemukan"


class StoreFailure(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Terjadi kesalahan pada server"
