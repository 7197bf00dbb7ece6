"""
Error taxonomy for the booking core.

Every error carries a ``user_message`` suitable for showing inline next
to the form that triggered it. Local errors are raised before any network
call; ``ApiError`` subclasses are produced by the REST client.
"""

from typing import Optional


class HomeHubError(Exception):
    """Base class for all booking-core errors."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None) -> None:
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class BookingValidationError(HomeHubError):
    """Pre-submission validation failed (missing field, bad date, ...)."""

    default_message = "Please fill in all required fields"


class InvalidTransitionError(HomeHubError):
    """Requested status change is not allowed from the current state."""

    default_message = "This booking can no longer be changed that way."


class OrphanedBookingError(HomeHubError):
    """The booking's service no longer resolves."""

    default_message = "The service for this booking no longer exists."


class DuplicateSubmissionError(HomeHubError):
    """The same booking is already being submitted."""

    default_message = "This booking is already being submitted. Please wait."


class ApiError(HomeHubError):
    """A REST call failed."""

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthError(ApiError):
    default_message = "Please log in to continue"


class NotFoundError(ApiError):
    default_message = "Not found. Please refresh and try again."


class ServerValidationError(ApiError):
    default_message = "The server rejected the request."


class BookingTimeoutError(ApiError):
    default_message = "The request took too long. Please check your connection and try again."


class UnknownApiError(ApiError):
    default_message = "Booking failed. Please try again."


def error_for_status(status_code: int, server_message: Optional[str] = None) -> ApiError:
    """Map an HTTP error status onto the taxonomy."""
    if status_code == 401:
        return AuthError(status_code=status_code)
    if status_code == 404:
        return NotFoundError(server_message, status_code=status_code)
    if status_code in (400, 409, 422):
        return ServerValidationError(server_message, status_code=status_code)
    return UnknownApiError(server_message, status_code=status_code)
