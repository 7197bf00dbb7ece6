from homehub.api.errors import (
    ApiError,
    AuthError,
    BookingTimeoutError,
    HomeHubError,
    NotFoundError,
    ServerValidationError,
    UnknownApiError,
)
from homehub.api.result import Result
from homehub.api.client import HomeHubClient

__all__ = [
    "HomeHubClient",
    "Result",
    "HomeHubError",
    "ApiError",
    "AuthError",
    "NotFoundError",
    "ServerValidationError",
    "BookingTimeoutError",
    "UnknownApiError",
]
